#!/usr/bin/env python3
"""
LeakProbe CLI - exposed file discovery and secret scanning
Probe -> Crawl -> Scan: finds reachable files on an origin and reports leaked
credentials and endpoints.
"""

import sys

from colorama import init, Fore, Style
init(autoreset=True)

from leakprobe import __version__
from leakprobe.core.config import (
    KNOWN_PROXIES, get_default_config, load_proxy_list, save_proxy_list
)
from leakprobe.core.errors import MalformedUrl
from leakprobe.core.logger import logger, set_verbose, set_silent
from leakprobe.core.normalizer import URLNormalizer
from leakprobe.output.json_exporter import JSONExporter, group_endpoints, summarize
from leakprobe.pipelines.scan import ScanRunner
from leakprobe.services.datastore import DataStore


def print_banner():
    print(f"""
{Fore.CYAN}==================================================================={Style.RESET_ALL}
  {Fore.WHITE}LeakProbe{Style.RESET_ALL} {Fore.GREEN}v{__version__}{Style.RESET_ALL} - exposed file and secret scanner
  {Fore.YELLOW}For authorized security testing only{Style.RESET_ALL}
{Fore.CYAN}==================================================================={Style.RESET_ALL}
""", flush=True)


def show_help():
    print(f"""
{Fore.CYAN}Usage:{Style.RESET_ALL}
    leakprobe <command> <target> [options]
    python -m leakprobe <command> <target> [options]

{Fore.CYAN}Commands:{Style.RESET_ALL}
    {Fore.GREEN}scan{Style.RESET_ALL}        Probe, crawl and scan one origin
    {Fore.GREEN}batch{Style.RESET_ALL}       Scan every origin listed in a file (one per line)
    {Fore.GREEN}show{Style.RESET_ALL}        Print the saved report of a target (no target: list targets)
    {Fore.GREEN}proxies{Style.RESET_ALL}     List configured and known proxy templates
    {Fore.GREEN}help{Style.RESET_ALL}        Show this message

{Fore.CYAN}Options:{Style.RESET_ALL}
    -o, --output <dir>      Output directory (default: scan_output)
    -p, --proxy <domain>    Add a CORS relay proxy (repeatable)
    --disable-proxy <domain> Keep a proxy in the list but skip it (repeatable)
    --remove-proxy <domain>  Drop a proxy from the list (repeatable)
    --proxies-file <file>   Load proxy templates from a JSON file
    --save-proxies          Write the resulting proxy list back to --proxies-file
    --max-pages <n>         Maximum pages to crawl (default: 30)
    --no-probe              Skip probing common config paths
    --no-sitemap            Skip sitemap.xml / sitemap_index.xml
    -v, --verbose           Verbose output
    -s, --silent            Silent mode (errors only)

{Fore.CYAN}Examples:{Style.RESET_ALL}
    leakprobe scan example.com
    leakprobe scan https://example.com -p corsproxy.io --max-pages 10
    leakprobe batch targets.txt -o results
    leakprobe show example.com
    leakprobe proxies --proxies-file proxies.json --disable-proxy corsproxy.io --save-proxies
""")


def parse_args(args):
    options = {
        'output': 'scan_output',
        'proxies': [],
        'disable_proxies': [],
        'remove_proxies': [],
        'proxies_file': None,
        'save_proxies': False,
        'max_pages': None,
        'probe': True,
        'sitemap': True,
        'verbose': False,
        'silent': False,
    }

    positional = []
    i = 0
    while i < len(args):
        arg = args[i]
        if arg in ['-o', '--output']:
            if i + 1 < len(args):
                options['output'] = args[i + 1]
                i += 2
                continue
        elif arg in ['-p', '--proxy']:
            if i + 1 < len(args):
                options['proxies'].append(args[i + 1])
                i += 2
                continue
        elif arg == '--disable-proxy':
            if i + 1 < len(args):
                options['disable_proxies'].append(args[i + 1])
                i += 2
                continue
        elif arg == '--remove-proxy':
            if i + 1 < len(args):
                options['remove_proxies'].append(args[i + 1])
                i += 2
                continue
        elif arg == '--proxies-file':
            if i + 1 < len(args):
                options['proxies_file'] = args[i + 1]
                i += 2
                continue
        elif arg == '--max-pages':
            if i + 1 < len(args):
                try:
                    options['max_pages'] = max(1, int(args[i + 1]))
                except ValueError:
                    print(f"{Fore.YELLOW}[!] Ignoring invalid --max-pages value: {args[i + 1]}{Style.RESET_ALL}")
                i += 2
                continue
        elif arg == '--save-proxies':
            options['save_proxies'] = True
        elif arg == '--no-probe':
            options['probe'] = False
        elif arg == '--no-sitemap':
            options['sitemap'] = False
        elif arg in ['-v', '--verbose']:
            options['verbose'] = True
        elif arg in ['-s', '--silent']:
            options['silent'] = True
        elif arg in ['-h', '--help']:
            return 'help', [], options
        elif not arg.startswith('-'):
            positional.append(arg)
        i += 1

    command = positional[0] if positional else None
    targets = positional[1:] if len(positional) > 1 else []

    return command, targets, options


def build_config(options):
    config = get_default_config()
    config.output_dir = options['output']
    config.probe.enabled = options['probe']
    config.crawl.sitemaps = options['sitemap']
    if options['max_pages']:
        config.crawl.max_pages = options['max_pages']

    if options['proxies_file']:
        config.proxies = load_proxy_list(options['proxies_file'])

    for domain in options['proxies']:
        config.add_proxy(domain)

    for domain in options['disable_proxies']:
        if not config.set_proxy_enabled(domain, False):
            logger.warning(f"Unknown proxy {domain}; nothing to disable")

    for domain in options['remove_proxies']:
        if not config.remove_proxy(domain):
            logger.warning(f"Unknown proxy {domain}; nothing to remove")

    if options['save_proxies']:
        if options['proxies_file']:
            save_proxy_list(options['proxies_file'], config.proxies)
        else:
            logger.warning("--save-proxies needs --proxies-file; proxy list not saved")

    return config


def apply_log_level(options):
    if options['verbose']:
        set_verbose(True)
    elif options['silent']:
        set_silent(True)


def print_report(report):
    results = report.results
    counts = summarize(results)
    summary = report.summary

    print(f"\n{Fore.GREEN}[+] Scan complete: {summary.domain}{Style.RESET_ALL}")
    print(f"  Scanned at: {summary.scanned_at}")
    print(f"  Pages crawled: {summary.pages_crawled}")
    print(f"  Files scanned: {summary.files_scanned}")
    print(f"  Files with findings: {counts['files_with_findings']}")
    print(f"  Files with secrets: {Fore.RED}{counts['files_with_secrets']}{Style.RESET_ALL}")
    print(f"  Files with endpoints: {Fore.BLUE}{counts['files_with_endpoints']}{Style.RESET_ALL}")
    print(f"  Secret types found: {counts['secret_types_found']}")
    print(f"  Unique endpoints: {counts['unique_endpoints']}")

    secret_results = [r for r in results if r.has_secrets]
    if secret_results:
        print(f"\n  {Fore.CYAN}Secrets:{Style.RESET_ALL}")
        for result in secret_results:
            print(f"    {Fore.WHITE}{result.source_url}{Style.RESET_ALL}")
            for finding in result.secrets:
                color = Fore.YELLOW if finding.is_structured else Fore.RED
                print(f"      {color}{finding.type}{Style.RESET_ALL}: {len(finding.values)} value(s)")

    groups = group_endpoints(results)
    if any(groups.values()):
        print(f"\n  {Fore.CYAN}Endpoints:{Style.RESET_ALL}")
        print(f"    API endpoints: {len(groups['api'])}")
        print(f"    Full URLs: {len(groups['full_urls'])}")
        print(f"    Path endpoints: {len(groups['paths'])}")


def print_scan_header(target, config):
    print(f"\n{Fore.CYAN}[SCAN] {target}{Style.RESET_ALL}")
    print(f"  Output: {config.output_dir}")
    print(f"  Max pages: {config.crawl.max_pages}")
    print(f"  Proxies: {len(config.active_proxies())}\n")


def export_report(report, options, config):
    json_dir = JSONExporter(config.output_dir).export(report)

    if not options['silent']:
        print_report(report)
        print(f"\n  {Fore.CYAN}JSON exports: {json_dir}{Style.RESET_ALL}")


def run_scan(target, options, config=None):
    config = config or build_config(options)

    if not options['silent']:
        print_scan_header(target, config)

    try:
        runner = ScanRunner(config, silent_mode=options['silent'])
        report = runner.run(target)
    except KeyboardInterrupt:
        print(f"\n{Fore.YELLOW}[!] Scan interrupted{Style.RESET_ALL}")
        sys.exit(1)

    export_report(report, options, config)
    return report


def run_batch(filepath, options):
    config = build_config(options)
    datastore = DataStore(config.output_dir)

    try:
        batch_targets = datastore.load_url_list(filepath)
    except OSError as e:
        print(f"{Fore.RED}[-] Cannot read {filepath}: {e}{Style.RESET_ALL}")
        sys.exit(1)

    if not options['silent']:
        print(f"{Fore.YELLOW}Batch mode - {len(batch_targets)} target(s){Style.RESET_ALL}")
        print_scan_header(filepath, config)

    try:
        runner = ScanRunner(config, silent_mode=options['silent'])
        reports = runner.run_many(batch_targets)
    except KeyboardInterrupt:
        print(f"\n{Fore.YELLOW}[!] Batch interrupted{Style.RESET_ALL}")
        sys.exit(1)

    for report in reports:
        export_report(report, options, config)
    return reports


def show_target(target, options):
    datastore = DataStore(options['output'])

    if not target:
        targets = datastore.get_all_targets()
        if not targets:
            print(f"\n{Fore.YELLOW}No scans found in {options['output']}{Style.RESET_ALL}")
            return None
        print(f"\n{Fore.CYAN}Existing scans in {options['output']}:{Style.RESET_ALL}\n")
        for name in targets:
            print(f"  {Fore.WHITE}{name}{Style.RESET_ALL}")
        return None

    try:
        key = URLNormalizer().normalize_origin(target)
    except MalformedUrl:
        key = target

    report = datastore.load_report(key) or datastore.load_report(target)
    if report is None:
        print(f"{Fore.RED}[-] No saved report for {target}{Style.RESET_ALL}")
        return None

    print_report(report)
    return report


def show_proxies(options):
    config = build_config(options)

    print(f"\n{Fore.CYAN}Configured proxies:{Style.RESET_ALL}\n")
    if not config.proxies:
        print(f"  {Fore.YELLOW}None - requests go directly to the target{Style.RESET_ALL}")
    for proxy in config.proxies:
        state = f"{Fore.GREEN}on{Style.RESET_ALL}" if proxy.enabled else f"{Fore.RED}off{Style.RESET_ALL}"
        print(f"  [{state}] {proxy.domain}  {proxy.url_prefix}")

    print(f"\n{Fore.CYAN}Known proxy services:{Style.RESET_ALL}\n")
    for domain, prefix in KNOWN_PROXIES.items():
        print(f"  {Fore.GREEN}{domain}{Style.RESET_ALL}  {prefix}")


def require_target(targets, command, what='target'):
    if not targets:
        print(f"{Fore.RED}[-] Error: No {what} specified{Style.RESET_ALL}")
        print(f"Usage: leakprobe {command} <{what}>")
        sys.exit(1)
    return targets[0]


def main(argv=None):
    args = sys.argv[1:] if argv is None else argv

    if not args:
        print_banner()
        show_help()
        return

    command, targets, options = parse_args(args)
    apply_log_level(options)

    if command in ('help', None):
        print_banner()
        show_help()
        return

    if not options['silent']:
        print_banner()

    if command == 'scan':
        run_scan(require_target(targets, 'scan'), options)
    elif command == 'batch':
        run_batch(require_target(targets, 'batch', 'file'), options)
    elif command == 'show':
        show_target(targets[0] if targets else None, options)
    elif command == 'proxies':
        show_proxies(options)
    else:
        print(f"{Fore.RED}[-] Unknown command: {command}{Style.RESET_ALL}")
        show_help()
        sys.exit(1)


if __name__ == '__main__':
    main()

"""
DataStore service for persisting scan reports.
Each target gets its own directory holding the latest scan_result.json.
"""

import json
from pathlib import Path
from typing import Optional, List
from datetime import datetime
import uuid

from leakprobe.core.logger import logger
from leakprobe.models import ScanReport


class DataStore:

    REPORT_FILE = "scan_result.json"

    def __init__(self, output_dir: str = "scan_output"):
        self.base_dir = Path(output_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def safe_name(target: str) -> str:
        return target.replace("://", "_").replace("/", "_").replace(":", "_").replace(".", "_")

    def _get_target_dir(self, target: str, create: bool = True) -> Path:
        target_dir = self.base_dir / self.safe_name(target)
        if create:
            target_dir.mkdir(parents=True, exist_ok=True)
        return target_dir

    def generate_scan_id(self) -> str:
        return f"{datetime.now().strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:8]}"

    def report_path(self, target: str) -> Path:
        return self._get_target_dir(target, create=False) / self.REPORT_FILE

    def save_report(self, report: ScanReport) -> str:
        target_dir = self._get_target_dir(report.summary.domain)
        filepath = target_dir / self.REPORT_FILE

        with open(filepath, 'w') as f:
            json.dump(report.to_dict(), f, indent=2)

        return str(filepath)

    def load_report(self, target: str) -> Optional[ScanReport]:
        filepath = self.report_path(target)
        if not filepath.exists():
            # targets listed by get_all_targets() are already directory names
            filepath = self.base_dir / target / self.REPORT_FILE
            if not filepath.exists():
                return None

        return self.load_report_from_file(str(filepath))

    def load_report_from_file(self, filepath: str) -> Optional[ScanReport]:
        try:
            with open(filepath, 'r') as f:
                data = json.load(f)
            return ScanReport.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Could not load report {filepath}: {e}")
            return None

    def load_url_list(self, filepath: str) -> List[str]:
        urls = []
        with open(filepath, 'r') as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith('#'):
                    urls.append(line)
        return urls

    def get_all_targets(self) -> List[str]:
        targets = []
        if self.base_dir.exists():
            for item in sorted(self.base_dir.iterdir()):
                if item.is_dir() and (item / self.REPORT_FILE).exists():
                    targets.append(item.name)
        return targets

    def has_report(self, target: str) -> bool:
        return self.report_path(target).exists()

"""
Secret detection catalog.

Each rule is a (name, regex, flags) row compiled once at import time into a
frozen PatternCatalog. Rules run in declaration order and are independent of
each other: one substring may satisfy several rules.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from leakprobe.core.logger import logger
from leakprobe.models import PatternRule


I = re.IGNORECASE

SECRET_PATTERNS = [
    # AWS credentials
    ('AWS Session Token', r'ASIA[0-9A-Z]{16,}', 0),
    ('AWS SES SMTP Credentials', r'AKIA[0-9A-Z]{16}:[A-Za-z0-9/+=]{40}', 0),
    ('AWS Access Key', r'(?<![A-Za-z0-9])AKIA[0-9A-Z]{16}(?![A-Za-z0-9])', 0),
    ('AWS Secret Key', r'(?:aws_secret_access_key|AWS_SECRET_ACCESS_KEY|secretAccessKey|SecretAccessKey|secret_access_key|aws_secret|AWSSecretKey|awsSecretKey)\s*[:=]\s*[\'"]?([A-Za-z0-9/+=]{40})[\'"]?', I),

    # AWS resources
    ('AWS S3 Bucket (virtual-hosted)', r'https?://[a-z0-9][a-z0-9\-\.]{1,61}[a-z0-9]\.s3[.-][a-z0-9-]*\.amazonaws\.com/?[^\s"\']*', I),
    ('AWS S3 Bucket (path-style)', r'https?://s3[.-][a-z0-9-]*\.amazonaws\.com/[a-z0-9][a-z0-9\-\.]{1,61}[^\s"\']*', I),
    ('AWS S3 Bucket (s3://)', r's3://[a-z0-9][a-z0-9\-\.]{1,61}[a-z0-9](?:/[^\s"\']*)?', I),
    ('AWS ARN', r'arn:aws[a-z-]*:[a-z0-9-]+:[a-z0-9-]*:\d{12}:[\w\-/:.+@]+', I),
    ('AWS CloudFront Domain', r'https?://[a-z0-9]+\.cloudfront\.net/?[^\s"\']*', I),
    ('AWS API Gateway URL', r'https?://[a-z0-9]{10}\.execute-api\.[a-z0-9-]+\.amazonaws\.com/[^\s"\']*', I),
    ('AWS Cognito Identity Pool ID', r'[a-z]{2}-[a-z]+-\d:[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}', I),
    ('AWS Cognito User Pool ID', r'[a-z]{2}-[a-z]+-\d_[A-Za-z0-9]{9}', 0),
    ('AWS Cognito App Client ID', r'(?:userPoolClientId|clientId|AppClientId)\s*[:=]\s*[\'"]([0-9a-z]{26})[\'"]\s*', I),
    ('AWS Lambda Function URL', r'https?://[a-z0-9]+\.lambda-url\.[a-z0-9-]+\.on\.aws/?[^\s"\']*', I),
    ('AWS SQS Queue URL', r'https?://sqs\.[a-z0-9-]+\.amazonaws\.com/\d{12}/[a-zA-Z0-9_-]+', I),
    ('AWS SNS Topic ARN', r'arn:aws:sns:[a-z0-9-]+:\d{12}:[a-zA-Z0-9_-]+', I),
    ('AWS ECR Registry URL', r'\d{12}\.dkr\.ecr\.[a-z0-9-]+\.amazonaws\.com/[^\s"\']*', I),
    ('AWS RDS Endpoint', r'[a-z0-9-]+\.(?:[a-z0-9-]+\.)?[a-z]{2}-[a-z]+-\d\.rds\.amazonaws\.com', I),
    ('AWS ElastiCache Endpoint', r'[a-z0-9-]+\.(?:[a-z0-9-]+\.)?cfg\.[a-z]{2}-[a-z]+-\d\.cache\.amazonaws\.com', I),
    ('AWS Elastic Beanstalk URL', r'https?://[a-z0-9-]+\.[a-z]{2}-[a-z]+-\d\.elasticbeanstalk\.com/?[^\s"\']*', I),
    ('AWS Region Hardcoded', r'(?:region|AWS_REGION|aws_region)\s*[:=]\s*[\'"]?(us|eu|ap|sa|ca|me|af)-[a-z]+-\d[\'"]?', I),
    ('AWS Account ID', r'(?:account.?id|accountId|AccountId)\s*[:=]\s*[\'"]?(\d{12})[\'"]?', I),

    # Other cloud and infrastructure
    ('Google Service Account JSON', r'"type"\s*:\s*"service_account"', 0),
    ('Azure Storage Account Key', r'(?:AccountKey|account_key)\s*[:=]\s*[\'"][A-Za-z0-9+/=]{80,100}[\'"]', 0),
    ('Azure SAS Token', r'sv=\d{4}-\d{2}-\d{2}&ss=[a-zA-Z]+&srt=[a-zA-Z]+&sp=[a-zA-Z]+&se=\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z&st=\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z&spr=https?&sig=[A-Za-z0-9%]+', 0),
    ('Firebase Database URL', r'https?://[\w-]+\.firebaseio\.com/', 0),
    ('Google OAuth Client Secret', r'"client_secret"\s*:\s*"[A-Za-z0-9\-_]{24,}"', 0),

    # Databases
    ('MySQL URI', r'mysql://[\w%:.\-]+:[\w%:.\-]+@[\w%:.\-]+(:\d+)?/[\w%:.\-]+', I),
    ('SQL Server URI', r'mssql://[\w%:.\-]+:[\w%:.\-]+@[\w%:.\-]+(:\d+)?/[\w%:.\-]+', I),
    ('Elasticsearch Endpoint', r'https?://[\w.\-]+:9200/?', 0),
    ('CouchDB URI', r'https?://[\w%:.\-]+:[\w%:.\-]+@[\w%:.\-]+(:\d+)?/[\w%:.\-]+', I),
    ('Neo4j URI', r'neo4j\+s?://[\w%:.\-]+:[\w%:.\-]+@[\w%:.\-]+(:\d+)?/[\w%:.\-]+', I),

    # CI/CD and source control
    ('GitLab Personal Access Token', r'glpat-[0-9a-zA-Z\-_]{20,}', 0),
    ('GitHub App Token', r'ghs_[0-9a-zA-Z]{36,}', 0),
    ('CircleCI Token', r'circleci-token-[0-9a-zA-Z\-_]{20,}', 0),
    ('Travis CI Token', r'travis_[0-9a-zA-Z\-_]{20,}', 0),

    # Auth and identity
    ('OAuth Client Secret', r'client_secret\s*[:=]\s*[\'"][A-Za-z0-9\-_]{24,}[\'"]', 0),
    ('Auth0 Client Secret', r'auth0.+client_secret\s*[:=]\s*[\'"][A-Za-z0-9\-_]{24,}[\'"]', I),
    ('Okta API Token', r'\b00[a-zA-Z0-9\-_]{40}\b', 0),
    ('SAML Certificate', r'-----BEGIN CERTIFICATE-----[\s\S]+?-----END CERTIFICATE-----', 0),

    # Payment and SaaS
    ('PayPal Access Token', r'access_token\$production\$[0-9a-zA-Z\-_]+', 0),
    ('Razorpay API Key', r'rzp_live_[0-9a-zA-Z]{14,}', 0),
    ('Shopify Private App Token', r'shpat_[0-9a-fA-F]{32,}', 0),
    ('Square Access Token', r'sq0atp-[0-9A-Za-z\-_]{22,}', 0),

    # Messaging and email
    ('Telegram Bot Token', r'\d{9,10}:[a-zA-Z0-9_\-]{35}', 0),
    ('Postmark API Token', r'PM[a-zA-Z0-9]{34,}', 0),

    # Generic credentials
    ('Hardcoded Password', r'password\s*[:=]\s*[\'"][^\'"]{4,}[\'"]', I),
    ('API Key (generic)', r'api_key\s*[:=]\s*[\'"][A-Za-z0-9\-_]{8,}[\'"]', I),
    ('Secret (generic)', r'secret\s*[:=]\s*[\'"][A-Za-z0-9\-_]{8,}[\'"]', I),
    ('Token (generic)', r'token\s*[:=]\s*[\'"][A-Za-z0-9\-_]{8,}[\'"]', I),

    # Cloud and service keys
    ('Google API Key', r'AIza[0-9A-Za-z\-_]{35}', 0),
    ('Firebase Key', r'AAAA[A-Za-z0-9_\-]{7}:[A-Za-z0-9_\-]{140}', 0),
    ('Supabase Project URL', r'https?://[a-z0-9\-]+\.supabase\.co', I),
    ('Supabase API Key', r'sbp_[A-Za-z0-9\-_]{30,}', 0),
    ('Supabase JWT', r'eyJ[A-Za-z0-9_\-]+?\.[A-Za-z0-9_\-]+?\.[A-Za-z0-9_\-]+', 0),
    ('Stripe Secret Key', r'sk_live_[0-9a-zA-Z]{24}', 0),
    ('Stripe Test Key', r'sk_test_[0-9a-zA-Z]{24}', 0),
    ('Stripe Publishable Key', r'pk_(test|live)_[0-9a-zA-Z]{24}', 0),
    ('GitHub PAT', r'ghp_[0-9a-zA-Z]{36}', 0),
    ('GitHub OAuth Token', r'gho_[0-9a-zA-Z]{36}', 0),
    ('Slack Bot Token', r'xoxb-[0-9]{10,13}-[0-9]{10,13}-[A-Za-z0-9]{24,}', 0),
    ('Slack User Token', r'xoxp-[0-9]{10,13}-[0-9]{10,13}-[A-Za-z0-9]{24,}', 0),
    ('Discord Bot Token', r'[MN][A-Za-z\d]{23}\.[\w\-]{6}\.[\w\-]{27}', 0),
    ('Twilio SID', r'(?<![A-Za-z0-9])AC[a-f0-9]{32}(?![A-Za-z0-9])', I),
    ('Twilio Auth Token', r'(?<![A-Za-z0-9])[a-f0-9]{32}(?![A-Za-z0-9])', I),
    ('SendGrid API Key', r'SG\.[A-Za-z0-9_\-]{22}\.[A-Za-z0-9_\-]{43}', 0),
    ('Mailgun API Key', r'key-[0-9a-zA-Z]{32}', 0),
    ('OpenAI API Key', r'sk-[A-Za-z0-9]{48}', 0),
    ('Bearer Token', r'Bearer\s+[A-Za-z0-9\-._~+/]+=*', 0),
    ('JWT Token', r'\beyJ[A-Za-z0-9_\-]+?\.[A-Za-z0-9_\-]+?\.[A-Za-z0-9_\-]+', 0),
    ('Private Key', r'-----BEGIN (?:RSA|EC|DSA|PGP) PRIVATE KEY-----', 0),
    ('MongoDB URI', r'mongodb(?:\+srv)?://[^ "]+', I),
    ('PostgreSQL URI', r'postgres(?:ql)?://[^ "]+', I),
    ('Redis URI', r'redis://[^ "]+', I),
]

SENSITIVE_KEYS = [
    # AWS
    'aws_access_key_id', 'aws_secret_access_key', 'aws_session_token',
    'accesskeyid', 'secretaccesskey', 'sessiontoken',
    'aws_region', 'aws_account_id', 'accountid',
    # Generic secrets
    'password', 'passwd', 'pwd', 'secret', 'token', 'api_key', 'apikey',
    'api_secret', 'apisecret', 'auth_token', 'authtoken',
    'access_token', 'accesstoken', 'refresh_token', 'refreshtoken',
    'client_secret', 'clientsecret', 'private_key', 'privatekey',
    'encryption_key', 'encryptionkey', 'signing_key', 'signingkey',
    'webhook_secret', 'jwt_secret', 'bearer',
    # Database
    'db_password', 'database_password', 'db_pass', 'connection_string',
    'mongodb_uri', 'postgres_uri', 'mysql_uri', 'redis_url', 'database_url',
    # Cloud and services
    'firebase_token', 'firebase_key', 'supabase_key', 'stripe_secret',
    'twilio_auth_token', 'sendgrid_api_key', 'mailgun_api_key',
    'github_token', 'gitlab_token', 'slack_token', 'discord_token',
    'openai_api_key', 'anthropic_api_key',
    # Endpoints
    'endpoint', 'base_url', 'baseurl', 'api_url', 'apiurl', 'api_endpoint',
    'server_url', 'backend_url', 'host', 'hostname',
]

_KEY_SEPARATORS = re.compile(r'[-_.]')


def normalize_key(key: str) -> str:
    """Lower-case a key and drop '-', '_' and '.' so API_KEY == apiKey == api.key."""
    return _KEY_SEPARATORS.sub('', key.lower())


def compile_rules(rows: Iterable[Tuple[str, str, int]]) -> Tuple[PatternRule, ...]:
    rules = []
    for name, pattern, flags in rows:
        try:
            rules.append(PatternRule(name=name, pattern=re.compile(pattern, flags | re.ASCII)))
        except re.error as e:
            logger.warning(f"Skipping pattern '{name}': {e}")
    return tuple(rules)


@dataclass(frozen=True)
class PatternCatalog:
    rules: Tuple[PatternRule, ...]
    sensitive_keys: Tuple[str, ...]

    @classmethod
    def build(cls, rows=None, keys=None) -> "PatternCatalog":
        rows = SECRET_PATTERNS if rows is None else rows
        keys = SENSITIVE_KEYS if keys is None else keys

        normalized = []
        for key in keys:
            clean = normalize_key(key)
            if clean and clean not in normalized:
                normalized.append(clean)

        return cls(rules=compile_rules(rows), sensitive_keys=tuple(normalized))

    def is_sensitive_key(self, key: str) -> bool:
        clean = normalize_key(key)
        return any(sk in clean for sk in self.sensitive_keys)

    def rule_names(self) -> List[str]:
        return [rule.name for rule in self.rules]

    def __len__(self) -> int:
        return len(self.rules)


DEFAULT_CATALOG = PatternCatalog.build()

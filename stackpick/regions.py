"""
AWS regions offered when no region is given on the command line.
"""

from typing import List, Tuple

AWS_REGIONS: List[Tuple[str, str]] = [
    ("US East (N. Virginia) - us-east-1", "us-east-1"),
    ("US East (Ohio) - us-east-2", "us-east-2"),
    ("US West (N. California) - us-west-1", "us-west-1"),
    ("US West (Oregon) - us-west-2", "us-west-2"),
    ("Europe (Ireland) - eu-west-1", "eu-west-1"),
    ("Europe (London) - eu-west-2", "eu-west-2"),
    ("Europe (Paris) - eu-west-3", "eu-west-3"),
    ("Europe (Frankfurt) - eu-central-1", "eu-central-1"),
    ("Europe (Stockholm) - eu-north-1", "eu-north-1"),
    ("Europe (Milan) - eu-south-1", "eu-south-1"),
    ("Asia Pacific (Tokyo) - ap-northeast-1", "ap-northeast-1"),
    ("Asia Pacific (Seoul) - ap-northeast-2", "ap-northeast-2"),
    ("Asia Pacific (Osaka) - ap-northeast-3", "ap-northeast-3"),
    ("Asia Pacific (Singapore) - ap-southeast-1", "ap-southeast-1"),
    ("Asia Pacific (Sydney) - ap-southeast-2", "ap-southeast-2"),
    ("Asia Pacific (Jakarta) - ap-southeast-3", "ap-southeast-3"),
    ("Asia Pacific (Mumbai) - ap-south-1", "ap-south-1"),
    ("Asia Pacific (Hong Kong) - ap-east-1", "ap-east-1"),
    ("Canada (Central) - ca-central-1", "ca-central-1"),
    ("South America (São Paulo) - sa-east-1", "sa-east-1"),
    ("Africa (Cape Town) - af-south-1", "af-south-1"),
    ("Middle East (Bahrain) - me-south-1", "me-south-1"),
    ("Middle East (UAE) - me-central-1", "me-central-1"),
]


def is_valid_region(region: str) -> bool:
    """Basic AWS region format check, e.g. "eu-west-1"."""
    parts = region.split("-")
    if len(parts) < 3 or not parts[-1].isdigit():
        return False
    return len(parts[0]) == 2 and parts[0].isalpha() and all(p.isalpha() for p in parts[1:-1])

import os, boto3
from typing import Optional

# region comes from src.config; None lets boto3 resolve it
def _client(service: str, endpoint_env: str, region: Optional[str] = None):
    kwargs = {}
    if region: kwargs["region_name"] = region
    ep = os.environ.get(endpoint_env)
    if ep: kwargs["endpoint_url"] = ep
    return boto3.client(service, **kwargs)

def codecommit(region: Optional[str] = None):
    return _client("codecommit", "AWS_ENDPOINT_URL_CODECOMMIT", region)

def codepipeline(region: Optional[str] = None):
    return _client("codepipeline", "AWS_ENDPOINT_URL_CODEPIPELINE", region)

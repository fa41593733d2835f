"""boto3 client construction from worker configuration."""

import boto3
from botocore.client import Config

from thumbd.infrastructure.config import WorkerConfig


def create_client(service: str, config: WorkerConfig):
    """
    Create a boto3 client for `service` ('s3' or 'sqs').

    Explicit credentials are passed only when configured; otherwise boto3's
    own credential chain applies.
    """
    kwargs = {
        'region_name': config.aws_region,
        'config': Config(signature_version='s3v4') if service == 's3' else None,
    }

    if config.aws_key and config.aws_secret:
        kwargs['aws_access_key_id'] = config.aws_key
        kwargs['aws_secret_access_key'] = config.aws_secret

    if service == 's3' and config.s3_endpoint:
        kwargs['endpoint_url'] = config.s3_endpoint

    return boto3.client(service, **{k: v for k, v in kwargs.items() if v is not None})

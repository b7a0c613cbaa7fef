from datetime import tzinfo
from pathlib import Path
from typing import List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from collectors.aws.normalizer import AWSNormalizer
from collectors.aws.usage import read_usage
from collectors.common import load_sample_export
from core import dates
from core.config import Settings, _get_env, get_settings
from core.consolidation import consolidate_reports
from core.errors import ConfigurationError, RequestError, ResponseError
from core.log import get_logger
from core.report import AWS, Report

SAMPLE_PATH = Path(__file__).with_name("sample.csv")


def _build_session(region: str) -> boto3.Session:
    session = boto3.Session(
        aws_access_key_id=_get_env("AWS_ACCESS_KEY_ID"),
        aws_secret_access_key=_get_env("AWS_SECRET_ACCESS_KEY"),
        region_name=region,
    )

    role_arn = _get_env("AWS_ROLE_ARN")
    if role_arn:
        sts = session.client("sts", region_name=region)
        assume_args = {"RoleArn": role_arn, "RoleSessionName": "iaas-billing"}
        external_id = _get_env("AWS_EXTERNAL_ID")
        if external_id:
            assume_args["ExternalId"] = external_id
        creds = sts.assume_role(**assume_args)["Credentials"]
        session = boto3.Session(
            aws_access_key_id=creds["AccessKeyId"],
            aws_secret_access_key=creds["SecretAccessKey"],
            aws_session_token=creds["SessionToken"],
            region_name=region,
        )
    return session


def monthly_billing_key(account_number: str, year: int, month: int) -> str:
    return f"{account_number}-aws-billing-csv-{year}-{dates.pad(month)}.csv"


def fetch_monthly_usage(s3_client, bucket: str, key: str) -> bytes:
    try:
        response = s3_client.get_object(Bucket=bucket, Key=key)
    except ClientError as exc:
        status = exc.response.get("Error", {}).get("Code", "unknown")
        raise ResponseError(status, provider=AWS, details={"bucket": bucket, "key": key}) from exc
    except BotoCoreError as exc:
        raise RequestError(str(exc), provider=AWS, details={"bucket": bucket, "key": key}) from exc
    return response["Body"].read()


def normalized_usage(data: bytes, availability_zone: str, log, location: tzinfo) -> List[Report]:
    """Decode, normalize and consolidate one monthly AWS export."""
    usages = read_usage(data, availability_zone, log)
    reports = AWSNormalizer(log, location, availability_zone).normalize(usages)
    return consolidate_reports(reports)


def _collect_from_api(settings: Settings, log, s3_client=None) -> List[Report]:
    if not (settings.aws_billing_bucket and settings.aws_account_number):
        raise ConfigurationError("AWS_BILLING_BUCKET and AWS_ACCOUNT_NUMBER must be set", provider=AWS)

    location = settings.time_zone
    current = dates.now(location)
    key = monthly_billing_key(settings.aws_account_number, current.year, current.month)
    if s3_client is None:
        s3_client = _build_session(settings.aws_region).client("s3", region_name=settings.aws_region)

    log.info("fetching_monthly_usage", bucket=settings.aws_billing_bucket, key=key)
    data = fetch_monthly_usage(s3_client, settings.aws_billing_bucket, key)
    return normalized_usage(data, settings.aws_availability_zone, log, location)


def collect(settings: Optional[Settings] = None, s3_client=None) -> List[Report]:
    """Return consolidated AWS reports for the current month."""
    settings = settings or get_settings()
    log = get_logger(AWS)
    if settings.aws_use_sample:
        data = load_sample_export(SAMPLE_PATH)
        return normalized_usage(data, settings.aws_availability_zone, log, settings.time_zone)

    if not settings.aws_billing_bucket and s3_client is None:
        log.info("aws_not_configured")
        return []

    return _collect_from_api(settings, log, s3_client)

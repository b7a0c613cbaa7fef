import argparse
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest
import requests
from botocore.exceptions import ClientError
from google.api_core.exceptions import NotFound

from collectors import run_all
from collectors.aws import collector as aws_collector
from collectors.azure import collector as azure_collector
from collectors.gcp import collector as gcp_collector
from core.config import Settings
from core.errors import ConfigurationError, EmptyResultError, ParseError, RequestError, ResponseError


@pytest.fixture
def settings():
    return Settings(time_zone_name="UTC")


def test_aws_billing_key():
    assert aws_collector.monthly_billing_key("123456789012", 2016, 3) == "123456789012-aws-billing-csv-2016-03.csv"


def test_aws_collect_reads_monthly_export_from_s3(settings):
    s3 = MagicMock()
    s3.get_object.return_value = {"Body": MagicMock(read=MagicMock(return_value=aws_collector.SAMPLE_PATH.read_bytes()))}
    settings = replace(settings, aws_billing_bucket="billing", aws_account_number="123456789012", aws_availability_zone="us-east-1a")

    reports = aws_collector.collect(settings, s3_client=s3)

    now = datetime.now(settings.time_zone)
    s3.get_object.assert_called_once_with(
        Bucket="billing",
        Key=f"123456789012-aws-billing-csv-{now.year}-{now.month:02d}.csv",
    )
    assert len(reports) == 1
    assert reports[0].resource == "AWS"
    assert reports[0].region == "us-east-1a"


def test_aws_missing_object_is_a_response_error(settings):
    s3 = MagicMock()
    s3.get_object.side_effect = ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")
    settings = replace(settings, aws_billing_bucket="billing", aws_account_number="123456789012")

    with pytest.raises(ResponseError) as excinfo:
        aws_collector.collect(settings, s3_client=s3)
    assert excinfo.value.provider == "AWS"
    assert excinfo.value.status == "NoSuchKey"


def test_aws_requires_account_number(settings):
    with pytest.raises(ConfigurationError):
        aws_collector.collect(replace(settings, aws_billing_bucket="billing"), s3_client=MagicMock())


def test_aws_unconfigured_returns_nothing(settings):
    assert aws_collector.collect(settings) == []


def test_aws_sample_mode(settings):
    reports = aws_collector.collect(replace(settings, aws_use_sample=True))
    assert len(reports) == 1


def _response(status_code=200, payload=None, content=b"", reason="OK"):
    response = MagicMock(status_code=status_code, content=content, reason=reason)
    response.json.return_value = payload
    return response


def _enrollment_session(detail: bytes):
    session = MagicMock()
    today = datetime.now(timezone.utc)
    listing = {
        "contract_version": "1.0",
        "AvailableMonths": [
            {
                "Month": f"{today.year}-{today.month:02d}",
                "LinkToDownloadDetailReport": "/rest/100/usage-report?month=current&type=detail",
            }
        ],
    }
    session.get.side_effect = [_response(payload=listing), _response(content=detail)]
    return session


def test_azure_client_downloads_detail_report():
    session = _enrollment_session(b"detail")
    client = azure_collector.EnrollmentClient("https://ea.example.com/", "secret", "100", session=session)
    today = datetime.now(timezone.utc)

    assert client.monthly_usage(today.year, today.month) == b"detail"
    listing_call, detail_call = session.get.call_args_list
    assert listing_call.args[0] == "https://ea.example.com/rest/100/usage-reports"
    assert listing_call.kwargs["headers"] == {"authorization": "bearer secret", "api-version": "1.0"}
    assert detail_call.args[0] == "https://ea.example.com/rest/100/usage-report?month=current&type=detail"


def test_azure_missing_month_is_a_response_error():
    session = MagicMock()
    session.get.return_value = _response(payload={"AvailableMonths": []})
    client = azure_collector.EnrollmentClient("https://ea.example.com", "secret", "100", session=session)

    with pytest.raises(ResponseError):
        client.monthly_usage(2016, 10)


def test_azure_error_status_is_a_response_error():
    session = MagicMock()
    session.get.return_value = _response(status_code=401, reason="Unauthorized")
    client = azure_collector.EnrollmentClient("https://ea.example.com", "secret", "100", session=session)

    with pytest.raises(ResponseError) as excinfo:
        client.usage_reports()
    assert "401 Unauthorized" in str(excinfo.value)


def test_azure_transport_failure_is_a_request_error():
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("boom")
    client = azure_collector.EnrollmentClient("https://ea.example.com", "secret", "100", session=session)

    with pytest.raises(RequestError):
        client.usage_reports()


def test_azure_collect_with_client(settings):
    session = _enrollment_session(azure_collector.SAMPLE_PATH.read_bytes())
    client = azure_collector.EnrollmentClient("https://ea.example.com", "secret", "100", session=session)

    reports = azure_collector.collect(settings, client=client)

    assert len(reports) == 2
    assert {report.resource for report in reports} == {"Azure"}


def test_azure_malformed_export_propagates(settings):
    session = _enrollment_session(b"garbage,only\n")
    client = azure_collector.EnrollmentClient("https://ea.example.com", "secret", "100", session=session)

    with pytest.raises(ParseError):
        azure_collector.collect(settings, client=client)


def test_gcp_file_name():
    assert gcp_collector.daily_billing_file_name("Billing", date(2016, 3, 7)) == "Billing-2016-03-07.csv"


def test_gcp_fetch_skips_missing_days(log, location):
    sample = gcp_collector.SAMPLE_PATH.read_bytes()
    yesterday = datetime.now(location).date() - timedelta(days=1)

    def blob(name):
        missing = name.endswith("-01.csv")
        return MagicMock(download_as_bytes=MagicMock(side_effect=NotFound("gone") if missing else None, return_value=sample))

    bucket = MagicMock()
    bucket.blob.side_effect = blob

    exports = gcp_collector.fetch_daily_exports(bucket, "Billing", location, log)

    expected_days = [day for day in range(2, yesterday.day)]
    assert [fetched.day for fetched, _ in exports] == expected_days
    assert all(fetched.month == yesterday.month for fetched, _ in exports)
    assert bucket.blob.call_count == max(yesterday.day - 1, 0)


def test_gcp_collect_raises_when_month_is_empty(settings):
    bucket = MagicMock()
    bucket.blob.return_value.download_as_bytes.side_effect = NotFound("gone")

    with pytest.raises(EmptyResultError):
        gcp_collector.collect(replace(settings, gcp_bucket_name="billing"), bucket=bucket)


def test_gcp_requires_credentials(settings):
    with pytest.raises(ConfigurationError):
        gcp_collector.collect(replace(settings, gcp_bucket_name="billing"))


def test_gcp_sample_mode(settings):
    reports = gcp_collector.collect(replace(settings, gcp_use_sample=True))
    assert len(reports) == 2


def test_run_continues_after_a_failing_provider(make_report):
    status = {"sources": {}}
    collectors = {
        "aws": MagicMock(return_value=[make_report(id="aws", resource="AWS")]),
        "azure": MagicMock(side_effect=ParseError("bad export", provider="Azure")),
        "gcp": MagicMock(return_value=[make_report(id="gcp", resource="GCP")]),
    }
    with patch.dict(run_all.COLLECTORS, collectors):
        reports = run_all.collect_reports(status=status)

    assert [report.id for report in reports] == ["aws", "gcp"]
    assert status["sources"]["azure"] == {"state": "error", "entries": 0, "error": "[Azure] bad export"}
    assert status["sources"]["aws"]["state"] == "success"
    assert status["sources"]["gcp"]["entries"] == 1


def test_run_only_selected_providers(make_report):
    collectors = {
        "aws": MagicMock(return_value=[make_report(id="aws", resource="AWS")]),
        "azure": MagicMock(return_value=[]),
        "gcp": MagicMock(return_value=[]),
    }
    with patch.dict(run_all.COLLECTORS, collectors):
        run_all.collect_reports(["azure"])

    collectors["aws"].assert_not_called()
    collectors["azure"].assert_called_once_with()


def test_run_collectors_saves_reports(make_report):
    session = MagicMock()
    reports = [make_report()]
    with patch.object(run_all, "collect_reports", return_value=reports), patch.object(
        run_all, "SessionLocal", return_value=session
    ), patch.object(run_all, "save_reports", return_value=1) as save:
        assert run_all.run_collectors(["azure"]) == 1

    save.assert_called_once_with(session, reports)
    session.close.assert_called_once_with()


def test_run_collectors_without_reports_skips_persistence():
    with patch.object(run_all, "collect_reports", return_value=[]), patch.object(run_all, "save_reports") as save:
        assert run_all.run_collectors() == 0
    save.assert_not_called()


def test_parse_providers_rejects_unknown():
    assert run_all.parse_providers("AWS, gcp") == ["aws", "gcp"]
    with pytest.raises(argparse.ArgumentTypeError):
        run_all.parse_providers("aws,oracle")

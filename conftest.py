"""Pytest configuration and fixtures for the Well-Architected export tests."""

from datetime import datetime, timezone

import boto3
import pytest
from botocore.stub import Stubber

WORKLOAD_ID = "0123456789abcdef0123456789abcdef"
LENS_ALIAS = "wellarchitected"


@pytest.fixture(autouse=True)
def aws_environment(monkeypatch):
    """Keep every test away from real AWS credentials and Logz.io settings."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.delenv("LOGZIO_URL", raising=False)
    monkeypatch.delenv("LOGZIO_TOKEN", raising=False)


class FakeSender:
    """Records what the collector hands to the sink."""

    def __init__(self):
        self.sent: list[bytes] = []
        self.stopped = False
        self.closed = False

    def send(self, data: bytes) -> None:
        self.sent.append(data)

    def stop(self) -> None:
        self.stopped = True

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def sender() -> FakeSender:
    return FakeSender()


@pytest.fixture
def wa_client():
    return boto3.client("wellarchitected", region_name="us-east-1")


@pytest.fixture
def wa_stubber(wa_client):
    with Stubber(wa_client) as stubber:
        yield stubber
        stubber.assert_no_pending_responses()


@pytest.fixture
def s3_client():
    return boto3.client("s3", region_name="us-east-1")


# =============================================================================
# WELL-ARCHITECTED RESPONSES
# =============================================================================

@pytest.fixture
def workload() -> dict:
    return {
        "WorkloadId": WORKLOAD_ID,
        "WorkloadName": "Workload-Test",
        "Description": "Integration aws-well-architected tests",
        "Environment": "PREPRODUCTION",
        "UpdatedAt": datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc),
        "AwsRegions": ["us-east-1"],
        "ReviewOwner": "Logz.io",
        "Lenses": [LENS_ALIAS],
    }


@pytest.fixture
def lens_review() -> dict:
    return {
        "WorkloadId": WORKLOAD_ID,
        "LensReview": {
            "LensAlias": LENS_ALIAS,
            "LensName": "AWS Well-Architected Framework",
            "LensStatus": "CURRENT",
            "PillarReviewSummaries": [
                {"PillarId": "operationalExcellence", "PillarName": "Operational Excellence",
                 "RiskCounts": {"UNANSWERED": 11}},
                {"PillarId": "security", "PillarName": "Security",
                 "RiskCounts": {"HIGH": 2, "UNANSWERED": 9}},
                {"PillarId": "reliability", "PillarName": "Reliability",
                 "RiskCounts": {"MEDIUM": 1, "UNANSWERED": 12}},
            ],
        },
    }


@pytest.fixture
def improvements() -> dict:
    return {
        "WorkloadId": WORKLOAD_ID,
        "LensAlias": LENS_ALIAS,
        "ImprovementSummaries": [
            {"QuestionId": "sec-1", "PillarId": "security",
             "QuestionTitle": "How do you securely operate your workload?", "Risk": "HIGH",
             "ImprovementPlanUrl": "https://docs.aws.amazon.com/wellarchitected/sec-1"},
            {"QuestionId": "rel-1", "PillarId": "reliability",
             "QuestionTitle": "How do you manage service quotas and constraints?", "Risk": "MEDIUM",
             "ImprovementPlanUrl": "https://docs.aws.amazon.com/wellarchitected/rel-1"},
        ],
    }

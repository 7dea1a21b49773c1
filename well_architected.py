"""
Pipeline: AWS Well-Architected Tool → flat JSON records → Logz.io

Runs as a scheduled Lambda function. For every workload in the account:
  - the workload document itself becomes one record
  - each lens review is split into one record per pillar review summary
  - each lens's improvement list is split into one record per improvement

Every record is tagged with type "aws-wa" and shipped to the Logz.io listener
named by LOGZIO_URL, authenticated with LOGZIO_TOKEN. Any failure aborts the
whole run before anything is shipped.
"""

import logging
import os
import sys
from typing import Any, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from dotenv import load_dotenv

from errors import ConfigurationError, ExportError, SerializationError, TransportError
from flatten import Record, flatten, tag, to_json_bytes
from logzio_sender import MAX_BULK_SIZE_BYTES, LogzioSender

load_dotenv()

# ── Logging ─────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)
logging.getLogger("boto3").setLevel(logging.WARNING)
logging.getLogger("botocore").setLevel(logging.WARNING)

# ── Config ──────────────────────────────────────────────────────────
LOGZIO_URL_ENV_NAME = "LOGZIO_URL"
LOGZIO_TOKEN_ENV_NAME = "LOGZIO_TOKEN"
LOGZIO_SENDING_TYPE = "aws-wa"
REQUIRED_ENV_VARS = [LOGZIO_URL_ENV_NAME, LOGZIO_TOKEN_ENV_NAME]


class Sender(Protocol):
    def send(self, data: bytes) -> None: ...

    def stop(self) -> None: ...

    def close(self) -> None: ...


def load_settings() -> dict[str, Any]:
    """Read the run settings from the environment."""
    missing_vars = [var for var in REQUIRED_ENV_VARS if not os.getenv(var)]
    if missing_vars:
        raise ConfigurationError(f"Missing required environment variables: {', '.join(missing_vars)}")

    return {
        "logzio_url": os.environ[LOGZIO_URL_ENV_NAME],
        "logzio_token": os.environ[LOGZIO_TOKEN_ENV_NAME],
        "region": os.getenv("AWS_REGION") or os.getenv("REGION", "us-east-1"),
        "debug": os.getenv("LOGZIO_DEBUG", "false").lower() == "true",
    }


def _without_metadata(response: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in response.items() if k != "ResponseMetadata"}


class WellArchitectedCollector:
    """Collects every workload's review data and hands it to a sender."""

    def __init__(self, client: Any, sender: Sender, sending_type: str = LOGZIO_SENDING_TYPE):
        self.client = client
        self.sender = sender
        self.sending_type = sending_type

    # ───────────────────────────────────────────────────────────────
    # 1. FETCH from the Well-Architected Tool
    # ───────────────────────────────────────────────────────────────
    def get_workload_summaries(self) -> list[dict[str, Any]]:
        summaries = []
        params: dict[str, Any] = {}

        while True:
            try:
                response = self.client.list_workloads(**params)
            except (ClientError, BotoCoreError) as e:
                raise TransportError(f"did not get workload summaries: {e}") from e

            summaries.extend(response.get("WorkloadSummaries", []))

            if response.get("NextToken"):
                params["NextToken"] = response["NextToken"]
            else:
                break

        return summaries

    def get_workload(self, workload_id: str) -> dict[str, Any]:
        try:
            response = self.client.get_workload(WorkloadId=workload_id)
        except (ClientError, BotoCoreError) as e:
            raise TransportError(f"did not get workload with id {workload_id}: {e}") from e
        return response["Workload"]

    def get_lens_review(self, workload_id: str, lens_alias: str) -> dict[str, Any]:
        try:
            response = self.client.get_lens_review(WorkloadId=workload_id, LensAlias=lens_alias)
        except (ClientError, BotoCoreError) as e:
            raise TransportError(
                f"did not get lens review with workload id {workload_id} and lens alias {lens_alias}: {e}"
            ) from e
        review = _without_metadata(response)
        # records never carry a paging token
        if isinstance(review.get("LensReview"), dict):
            review["LensReview"].pop("NextToken", None)
        return review

    def get_lens_review_improvements(self, workload_id: str, lens_alias: str) -> list[dict[str, Any]]:
        """Return every page of improvements for one lens."""
        pages = []
        params: dict[str, Any] = {"WorkloadId": workload_id, "LensAlias": lens_alias}

        while True:
            try:
                response = self.client.list_lens_review_improvements(**params)
            except (ClientError, BotoCoreError) as e:
                raise TransportError(
                    f"did not get lens review improvements with workload id {workload_id} "
                    f"and lens alias {lens_alias}: {e}"
                ) from e

            page = _without_metadata(response)
            next_token = page.pop("NextToken", None)
            pages.append(page)

            if next_token:
                params["NextToken"] = next_token
            else:
                break

        return pages

    # ───────────────────────────────────────────────────────────────
    # 2. PARSE into tagged flat records
    # ───────────────────────────────────────────────────────────────
    def parse_workload(self, workload: dict[str, Any]) -> Record:
        try:
            return tag(workload, self.sending_type)
        except SerializationError as e:
            raise SerializationError(f"error parsing workload with id {workload.get('WorkloadId')}: {e}") from e

    def parse_lens_review(self, lens_review: dict[str, Any]) -> list[Record]:
        try:
            records = flatten(lens_review, "PillarReviewSummaries", "PillarReviewSummary", parent="LensReview")
            return [tag(record, self.sending_type) for record in records]
        except SerializationError as e:
            review = lens_review.get("LensReview")
            lens_alias = review.get("LensAlias") if isinstance(review, dict) else None
            raise SerializationError(
                f"error parsing lens review with workload id {lens_review.get('WorkloadId')} "
                f"and lens alias {lens_alias}: {e}"
            ) from e

    def parse_lens_review_improvements(self, improvements: dict[str, Any]) -> list[Record]:
        try:
            records = flatten(improvements, "ImprovementSummaries", "ImprovementSummary")
            return [tag(record, self.sending_type) for record in records]
        except SerializationError as e:
            raise SerializationError(
                f"error parsing lens review improvements with workload id {improvements.get('WorkloadId')} "
                f"and lens alias {improvements.get('LensAlias')}: {e}"
            ) from e

    # ───────────────────────────────────────────────────────────────
    # 3. COLLECT → SEND
    # ───────────────────────────────────────────────────────────────
    def collect(self) -> list[bytes]:
        """Fetch and flatten everything. Nothing is sent from here."""
        data: list[bytes] = []

        for summary in self.get_workload_summaries():
            workload_id = summary["WorkloadId"]
            workload = self.get_workload(workload_id)
            data.append(to_json_bytes(self.parse_workload(workload)))

            for lens_alias in workload.get("Lenses", []):
                lens_review = self.get_lens_review(workload_id, lens_alias)
                data.extend(to_json_bytes(r) for r in self.parse_lens_review(lens_review))

                for page in self.get_lens_review_improvements(workload_id, lens_alias):
                    data.extend(to_json_bytes(r) for r in self.parse_lens_review_improvements(page))

            logger.info(f"Collected workload {workload_id} ({len(data)} records so far)")

        return data

    def send(self, data: list[bytes]) -> None:
        try:
            for record in data:
                self.sender.send(record)
        except Exception:
            # drop whatever is still buffered
            self.sender.close()
            raise
        self.sender.stop()

    def run(self) -> int:
        logger.info("Collecting data...")
        data = self.collect()

        logger.info(f"Sending data to Logz.io... ({len(data)} records)")
        self.send(data)

        logger.info("Finished running")
        return len(data)


def build_collector(settings: dict[str, Any]) -> WellArchitectedCollector:
    client = boto3.client("wellarchitected", region_name=settings["region"])
    sender = LogzioSender(
        settings["logzio_token"],
        settings["logzio_url"],
        in_memory_queue=True,
        in_memory_capacity=MAX_BULK_SIZE_BYTES,
        debug=settings["debug"],
    )
    return WellArchitectedCollector(client, sender, LOGZIO_SENDING_TYPE)


# ───────────────────────────────────────────────────────────────────
# LAMBDA ENTRYPOINT
# ───────────────────────────────────────────────────────────────────
def lambda_handler(event, context):
    try:
        collector = build_collector(load_settings())
        count = collector.run()
    except ExportError as e:
        logger.error(f"Run failed: {e}")
        raise

    return {"status": "success", "records": count}


if __name__ == "__main__":
    try:
        lambda_handler({}, None)
    except ExportError:
        sys.exit(1)

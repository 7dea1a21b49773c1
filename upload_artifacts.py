"""
Upload the packaged Lambda function and its deployment template to S3.

Both files are read from UPLOAD_DIR and written publicly readable to
s3://BUCKET_NAME/BUCKET_DIR/<file name>. The first failed upload stops the run.
"""

import logging
import os
import sys

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from dotenv import load_dotenv

from errors import ConfigurationError, ExportError, TransportError

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# ── Config ──────────────────────────────────────────────────────────
AUTO_DEPLOYMENT_FILE_NAME = "auto-deployment.yaml"
ZIP_FILE_NAME = "lambda_function.zip"
UPLOAD_FILE_NAMES = [AUTO_DEPLOYMENT_FILE_NAME, ZIP_FILE_NAME]
DEFAULT_UPLOAD_DIR = "../upload"


def upload_file(s3, bucket: str, key: str, file_path: str) -> None:
    """Put one local file into the bucket with a public-read ACL."""
    if not os.path.isfile(file_path):
        raise ConfigurationError(f"file to upload does not exist: {file_path}")

    with open(file_path, "rb") as f:
        try:
            s3.put_object(Bucket=bucket, Key=key, ACL="public-read", Body=f)
        except (ClientError, BotoCoreError) as e:
            raise TransportError(f"error putting {file_path} into S3 bucket {bucket}: {e}") from e

    logger.info(f"{file_path} was uploaded successfully into s3://{bucket}/{key}")


def upload_artifacts(s3, bucket: str, directory: str, upload_dir: str = DEFAULT_UPLOAD_DIR) -> list[str]:
    """Upload every deployment artifact; returns the keys written."""
    directory = directory.strip("/")
    keys = []
    for file_name in UPLOAD_FILE_NAMES:
        key = f"{directory}/{file_name}"
        upload_file(s3, bucket, key, os.path.join(upload_dir, file_name))
        keys.append(key)
    return keys


def main() -> int:
    bucket_name = os.getenv("BUCKET_NAME")
    bucket_directory = os.getenv("BUCKET_DIR")
    upload_dir = os.getenv("UPLOAD_DIR", DEFAULT_UPLOAD_DIR)
    region = os.getenv("REGION", "us-east-1")

    try:
        missing_vars = [name for name, value in
                        (("BUCKET_NAME", bucket_name), ("BUCKET_DIR", bucket_directory)) if not value]
        if missing_vars:
            raise ConfigurationError(f"Missing required environment variables: {', '.join(missing_vars)}")

        s3 = boto3.client("s3", region_name=region)
        upload_artifacts(s3, bucket_name, bucket_directory, upload_dir)
    except ExportError as e:
        logger.error(f"Upload failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

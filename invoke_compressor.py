#!/usr/bin/env python3
"""
Quick script to invoke the deployed compressor Lambda and see the result or error
"""

import argparse
import json
import sys

import boto3

from config.constants import ARCHIVE_EXTENSION, RESULT_FIELDS, RESULT_SUCCEEDED


def build_event(args) -> dict:
    """Build the invocation event, leaving unset optional fields out"""
    event = {
        "processId": args.process_id,
        "originRegion": args.origin_region,
        "originBucket": args.bucket,
        "originKey": args.key,
        "targetRegion": args.target_region,
        "targetBucket": args.target_bucket,
        "targetKey": args.target_key,
        "deleteOriginal": args.delete_original,
        "queueRegion": args.queue_region,
        "queueAddress": args.queue_address,
    }
    return {name: value for name, value in event.items() if value not in (None, "")}


def invoke(function_name: str, event: dict, region: str = None) -> dict:
    """Invoke the function synchronously and return the decoded payload"""
    client = boto3.client("lambda", region_name=region)

    print(f"\n🔍 Invoking {function_name}")
    print(json.dumps(event, indent=2))
    print("-" * 60)

    response = client.invoke(
        FunctionName=function_name,
        InvocationType="RequestResponse",
        Payload=json.dumps(event).encode("utf-8"),
    )
    payload = json.loads(response["Payload"].read() or b"{}")

    if "FunctionError" in response:
        print(f"❌ Function error ({response['FunctionError']}):")
        print(json.dumps(payload, indent=2))
        return payload

    print("Result:")
    print(json.dumps({field: payload.get(field) for field in RESULT_FIELDS}, indent=2))
    if payload.get("result") == RESULT_SUCCEEDED:
        print(f"✓ Archive written to s3://{payload.get('bucket')}/{payload.get('key')}")
    return payload


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Invoke the S3 7z compressor Lambda")
    parser.add_argument("function_name")
    parser.add_argument("bucket")
    parser.add_argument("key")
    parser.add_argument("--region", help="Region the function is deployed in")
    parser.add_argument("--process-id", default="")
    parser.add_argument("--origin-region", default="")
    parser.add_argument("--target-region", default="")
    parser.add_argument("--target-bucket", default="")
    parser.add_argument("--target-key", default="")
    parser.add_argument("--delete-original", action="store_true")
    parser.add_argument("--queue-region", default="")
    parser.add_argument("--queue-address", default="")
    args = parser.parse_args()

    if args.key.endswith(ARCHIVE_EXTENSION):
        print(f"⚠️ {args.key} already ends with {ARCHIVE_EXTENSION}; the function will reject it")

    result = invoke(args.function_name, build_event(args), args.region)
    sys.exit(0 if result.get("result") == RESULT_SUCCEEDED else 1)

#!/usr/bin/env python3
"""
S3 7z Compressor CDK Application

This app defines the infrastructure for the single-object compressor:
an S3 object is repackaged into a .7z container (Copy mode) by a Lambda function.
"""

import aws_cdk as cdk
from lib.compressor_stack import CompressorStack

app = cdk.App()

# Get environment configuration
env = cdk.Environment(
    account=app.node.try_get_context("account"),
    region=app.node.try_get_context("region") or "ap-northeast-2"
)

CompressorStack(
    app,
    "S3SevenZipCompressorStack",
    env=env,
    description="S3 7z Compressor - single-object repackaging into 7z containers"
)

app.synth()

"""
Integration tests for the S3 text detection trigger.

These tests use mocked AWS services to test complete upload flows
from S3 notification to logged text blocks.
"""

"""SQS adapter – durable queue backed by AWS SQS (requires 'aws' extra)."""
from eda_fanout.adapters.sqs.queue import SqsConfig, SqsQueue, unwrap_sns_envelope

__all__ = ["SqsConfig", "SqsQueue", "unwrap_sns_envelope"]

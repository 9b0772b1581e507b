"""Application pipeline – topology wiring for the image-upload notification flow."""
from eda_fanout.application.pipeline.pipeline import (
    Pipeline,
    QueueFactory,
    build_image_pipeline,
    in_memory_queue_factory,
)
from eda_fanout.application.pipeline.settings import (
    PipelineSettings,
    env_prefix,
    image_pipeline_settings,
    load_queue_settings,
)

__all__ = [
    "Pipeline",
    "PipelineSettings",
    "QueueFactory",
    "build_image_pipeline",
    "env_prefix",
    "image_pipeline_settings",
    "in_memory_queue_factory",
    "load_queue_settings",
]

"""Application handlers – business handlers plugged into batch consumers."""
from eda_fanout.application.handlers.image import ImageProcessingHandler, ImageProcessor, LoggingImageProcessor
from eda_fanout.application.handlers.mailer import MailerHandler

__all__ = ["ImageProcessingHandler", "ImageProcessor", "LoggingImageProcessor", "MailerHandler"]

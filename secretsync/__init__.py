"""SecretSync - keeps annotated secrets populated and rotated."""

__version__ = "0.1.0"
__author__ = "SecretSync Team"

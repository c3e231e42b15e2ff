"""client for the GitLab generic packages registry."""

__version__ = "0.1.0"

"""Hyperon Provision — development environment provisioning for OpenCog Hyperon."""

__version__ = "0.1.0"

"""
Stackpick - Interactive deploy/destroy manager for AWS CDK stacks.

This package provides a keyboard-driven terminal selector over the stacks
declared by a CDK app, annotated with their live CloudFormation status.
"""

__version__ = "0.1.0"
__author__ = "Stackpick"

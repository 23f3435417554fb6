"""safectl - Declarative configuration and secret deployment.

Reconciles a declared set of configuration values and secrets against a
pluggable backing store (AWS SSM, AWS Secrets Manager, a GPG-encrypted
file or a local JSON file).
"""

__version__ = "0.4.0"

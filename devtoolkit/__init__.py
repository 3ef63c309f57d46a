# devtoolkit/__init__.py
"""DevToolkit account service - authentication, sessions and AI usage quotas"""
__version__ = "1.0.0"

"""Service layer for the DevToolkit account service"""

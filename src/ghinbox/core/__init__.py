"""Core domain package for ghinbox.

Core contains the notification model, the sync algebra, the rule engine and
the manager without any HTTP or filesystem code, keeping the business logic
testable against fakes.
"""

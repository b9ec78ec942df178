"""Local pytest configuration shared by the engine client tests."""

pytest_plugins = ["pytest_plugins.logging.logging"]

APP_NAME = "rssterm"
__version__ = "0.1.0"
USER_AGENT = f"{APP_NAME}/{__version__}"

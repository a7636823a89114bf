import os
import logging
from dotenv import load_dotenv, find_dotenv

from harvest.authentication import HarvestOAuth
from harvest.client import HarvestController


def load_environment():
    """Load a .env file from the working directory or one of its parents."""
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        logging.info(f"Loading environment from {dotenv_path}")
        return load_dotenv(dotenv_path)
    logging.info("No .env file found, using the process environment")
    return False


class Config:
    """Harvest settings read from the environment when the object is created."""

    def __init__(self):
        self.HARVEST_ACCOUNT_NAME = os.getenv("HARVEST_ACCOUNT_NAME")
        self.HARVEST_USERNAME = os.getenv("HARVEST_USERNAME")
        self.HARVEST_PASSWORD = os.getenv("HARVEST_PASSWORD")
        self.HARVEST_ACCESS_TOKEN = os.getenv("HARVEST_ACCESS_TOKEN")  # Optional
        self.HARVEST_CLIENT_ID = os.getenv("HARVEST_CLIENT_ID")  # Optional, OAuth only
        self.HARVEST_CLIENT_SECRET = os.getenv("HARVEST_CLIENT_SECRET")  # Optional, OAuth only

    def validate(self):
        missing_vars = []
        if not self.HARVEST_ACCOUNT_NAME:
            missing_vars.append("HARVEST_ACCOUNT_NAME")
        if not self.HARVEST_ACCESS_TOKEN:
            if not self.HARVEST_USERNAME:
                missing_vars.append("HARVEST_USERNAME")
            if not self.HARVEST_PASSWORD:
                missing_vars.append("HARVEST_PASSWORD")

        if missing_vars:
            raise ValueError(f"Missing environment variables: {', '.join(missing_vars)}")
        return True

    def create_controller(self):
        """Build a HarvestController, preferring an access token over username and password."""
        self.validate()
        if self.HARVEST_ACCESS_TOKEN:
            return HarvestController(
                self.HARVEST_ACCOUNT_NAME,
                auth=f"Bearer {self.HARVEST_ACCESS_TOKEN}",
            )
        return HarvestController(
            self.HARVEST_ACCOUNT_NAME,
            username=self.HARVEST_USERNAME,
            password=self.HARVEST_PASSWORD,
        )

    def create_oauth(self, redirect_uri, token=None):
        """
        Build the OAuth2 flow for the configured account.

        Args:
            redirect_uri: Callback URL registered with the Harvest OAuth application
            token: Previously fetched token to reuse, if any

        Returns:
            HarvestOAuth for HARVEST_CLIENT_ID and HARVEST_CLIENT_SECRET
        """
        missing_vars = [
            name for name in ("HARVEST_ACCOUNT_NAME", "HARVEST_CLIENT_ID", "HARVEST_CLIENT_SECRET")
            if not getattr(self, name)
        ]
        if missing_vars:
            raise ValueError(f"Missing environment variables: {', '.join(missing_vars)}")
        return HarvestOAuth(
            self.HARVEST_ACCOUNT_NAME,
            self.HARVEST_CLIENT_ID,
            self.HARVEST_CLIENT_SECRET,
            redirect_uri,
            token=token,
        )


def load_config():
    load_environment()
    configs = Config()
    if configs.validate():
        return {
            "HARVEST_ACCOUNT_NAME": configs.HARVEST_ACCOUNT_NAME,
            "HARVEST_USERNAME": configs.HARVEST_USERNAME,
            "HARVEST_PASSWORD": configs.HARVEST_PASSWORD,
            "HARVEST_ACCESS_TOKEN": configs.HARVEST_ACCESS_TOKEN,
            "HARVEST_CLIENT_ID": configs.HARVEST_CLIENT_ID,
            "HARVEST_CLIENT_SECRET": configs.HARVEST_CLIENT_SECRET,
        }

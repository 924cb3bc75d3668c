"""
Azure AI Search provisioning

Loads configuration from a settings file (default `appsettings.json`), then:

 • Ensures the products index exists, seeding it with a generated catalog when created
 • Ensures the blob container exists and registers it as a search data source
 • Registers the enrichment skillset with the enabled skills
 • Recreates the indexer wiring data source, skillset and index together

Settings (JSON file, nested objects or colon separated keys):

  • AISearch:Name                : search service name
  • AISearch:Key                 : search admin key (omit to use Managed Identity / Azure CLI)
  • StorageAccount:Name          : storage account holding the source container
  • StorageAccount:Key           : storage account access key
  • Resources:*                  : optional resource name overrides
  • Skillset:EnabledSkills       : optional, default 'language-detection'
  • Pipeline:Mode                : optional, 'best-effort' (default) or 'strict'
  • Pipeline:PauseOnExit         : optional, wait for Enter before exiting (same as --pause)

Usage:

    python main.py [--settings appsettings.json] [--mode strict] [--skills ocr,merge] [--recreate-index]
"""

import argparse
import dataclasses
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from dependencies import get_config
from search_setup import PipelineMode, ProvisioningSettings, log_report, provision
from search_setup.skills import SKILL_NAMES
from telemetry import Telemetry
from tools.appconfig import DEFAULT_SETTINGS_FILE, ConfigurationError

APP_NAME = "search-setup"
APPLICATION_INSIGHTS_CONNECTION_STRING = "APPLICATIONINSIGHTS_CONNECTION_STRING"

# -------------------------------
# Arguments
# -------------------------------

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Provision the Azure AI Search index, data source, skillset and indexer.")
    parser.add_argument("--settings", default=DEFAULT_SETTINGS_FILE, help=f"settings file (default: {DEFAULT_SETTINGS_FILE})")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in PipelineMode],
        help="'strict' stops at the first failed stage, 'best-effort' runs every stage",
    )
    parser.add_argument("--skills", help=f"comma separated skills to enable, from: {', '.join(SKILL_NAMES)}")
    parser.add_argument("--recreate-index", action="store_true", help="delete the index first so it is recreated and reseeded")
    parser.add_argument("--pause", action="store_true", help="wait for Enter before exiting")
    return parser.parse_args(argv)


def apply_overrides(settings: ProvisioningSettings, args: argparse.Namespace) -> ProvisioningSettings:
    overrides = {}
    if args.mode:
        overrides["mode"] = PipelineMode.parse(args.mode)
    if args.skills is not None:
        overrides["enabled_skills"] = tuple(skill.strip() for skill in args.skills.split(",") if skill.strip())
    return dataclasses.replace(settings, **overrides) if overrides else settings


def _finish(exit_code: int, pause: bool) -> int:
    logging.info("[main] Completed!")
    if pause:
        input("Press Enter to continue")
    return exit_code

# -------------------------------
# Main Method
# -------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    Telemetry.configure_basic()

    logging.info("[main] Azure AI Search provisioning")

    pause = args.pause

    if not os.path.isfile(args.settings):
        logging.error(f"[main] Error: Cannot Read Configuration File '{args.settings}'")
        return _finish(1, pause)

    try:
        config = get_config(args.settings)
        pause = pause or config.read_env_boolean("Pipeline:PauseOnExit")
        Telemetry.configure_basic(config)
        Telemetry.configure_monitoring(config, APPLICATION_INSIGHTS_CONNECTION_STRING, APP_NAME)
        settings = apply_overrides(ProvisioningSettings.from_app_config(config), args)
    except (ConfigurationError, FileNotFoundError, ValueError) as e:
        logging.error(f"[main] Error: Invalid configuration in '{args.settings}'. {e}")
        return _finish(1, pause)

    try:
        report = provision(settings, recreate_index=args.recreate_index)
    except Exception as e:
        logging.error(f"[main] An unexpected error occurred: {e}")
        return _finish(1, pause)

    log_report(report)
    return _finish(report.exit_code, pause)

# -------------------------------
# Entry Point
# -------------------------------

if __name__ == "__main__":
    sys.exit(main())

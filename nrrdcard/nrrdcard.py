#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""nrrdcard
Version:  0.0.1
Author:   Sean O'Connell <sean@sdoconnell.net>
License:  MIT
Homepage: https://github.com/sdoconnell/nrrdcard
About:
A terminal-based vCard 3.0 builder. Contacts are described in YAML
files and rendered as RFC 2426 vCards.

usage: nrrdcard [-h] [-c <file>] [-v] for more help: nrrdcard <command> -h ...

Terminal-based vCard builder for nerds.

commands:
  (for more help: nrrdcard <command> -h)
    build               build a vCard from a contact file
    debug               show the properties built from a contact file
    version             show version info

optional arguments:
  -h, --help            show this help message and exit
  -c <file>, --config <file>
                        config file
  -v, --verbose         show skipped fields and other details


Copyright © 2021 Sean O'Connell

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
SOFTWARE.

"""
import argparse
import configparser
import logging
import os
import sys
from datetime import date

import yaml
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from nrrdcard import __version__
from nrrdcard.errors import VcardError
from nrrdcard.vcard import Vcard

APP_NAME = "nrrdcard"
APP_VERS = __version__
APP_COPYRIGHT = "Copyright © 2021 Sean O'Connell."
APP_LICENSE = "Released under MIT license."
DEFAULT_DATA_DIR = f"$HOME/.local/share/{APP_NAME}"
DEFAULT_CONFIG_FILE = f"$HOME/.config/{APP_NAME}/config"
DEFAULT_PRODID = f"-//sdoconnell.net/{APP_NAME} {APP_VERS}//EN"
DEFAULT_CONFIG = (
    "[main]\n"
    f"data_dir = {DEFAULT_DATA_DIR}\n"
    "# area code prepended to seven-digit phone numbers\n"
    "default_area_code =\n"
    "# time zone for dates without one (e.g., America/Denver),\n"
    "# leave empty to use the local time zone\n"
    "default_timezone =\n"
    "# PRODID written when a contact file doesn't set one\n"
    f"product_id = {DEFAULT_PRODID}\n"
    "\n"
    "[colors]\n"
    "disable_colors = false\n"
    "# custom colors\n"
    "#table_title = bright_blue\n"
    "#table_key = yellow\n"
    "#table_value = default\n"
)


class Cards():
    """Builds vCards from YAML contact files.

    Attributes:
        config_file (str):  application config file.
        data_dir (str):     directory where vCards are written.
        dflt_config (str):  the default config if none is present.

    """
    def __init__(
            self,
            config_file,
            data_dir,
            dflt_config):
        """Initializes a Cards() object."""
        self.config_file = config_file
        self.data_dir = data_dir
        self.config_dir = os.path.dirname(self.config_file)
        self.dflt_config = dflt_config

        # defaults
        self.default_area_code = None
        self.default_timezone = None
        self.product_id = DEFAULT_PRODID
        self.disable_colors = False
        self.color_title = "bright_blue"
        self.color_key = "yellow"
        self.color_value = "default"

        self._default_config()
        self._parse_config()

    def _default_config(self):
        """Create a default configuration directory and file if they
        do not already exist.

        """
        if not os.path.exists(self.config_file):
            try:
                os.makedirs(self.config_dir, exist_ok=True)
                with open(self.config_file, "w",
                          encoding="utf-8") as config_file:
                    config_file.write(self.dflt_config)
            except IOError:
                self._error_exit(
                    "Config file doesn't exist "
                    "and can't be created.")

    @staticmethod
    def _error_exit(errormsg):
        """Print an error message and exit with a status of 1

        Args:
            errormsg (str): the error message to display.

        """
        print(f'ERROR: {errormsg}.')
        sys.exit(1)

    def _parse_config(self):
        """Read and parse the configuration file."""
        config = configparser.ConfigParser()
        if os.path.isfile(self.config_file):
            try:
                config.read(self.config_file)
            except configparser.Error:
                self._error_exit("Error reading config file")

            if "main" in config:
                if config["main"].get("data_dir"):
                    self.data_dir = os.path.expandvars(
                        os.path.expanduser(
                            config["main"].get("data_dir")))
                self.default_area_code = (
                    config["main"].get("default_area_code") or None)
                self.default_timezone = (
                    config["main"].get("default_timezone") or None)
                if config["main"].get("product_id"):
                    self.product_id = config["main"].get("product_id")

            if "colors" in config:
                self.disable_colors = config["colors"].getboolean(
                    "disable_colors", fallback=False)
                self.color_title = config["colors"].get(
                    "table_title", self.color_title)
                self.color_key = config["colors"].get(
                    "table_key", self.color_key)
                self.color_value = config["colors"].get(
                    "table_value", self.color_value)

    def _load_contact(self, filename):
        """Read a YAML contact file.

        Args:
            filename (str): the contact file.

        Returns:
            data (dict):    the contact description.

        """
        filename = os.path.expandvars(os.path.expanduser(filename))
        try:
            with open(filename, "r",
                      encoding="utf-8") as contact_file:
                data = yaml.safe_load(contact_file)
        except (OSError, IOError):
            self._error_exit(f"unable to read contact file '{filename}'")
        except yaml.YAMLError:
            self._error_exit(f"invalid YAML in '{filename}'")
        if not isinstance(data, dict):
            self._error_exit(f"no contact found in '{filename}'")
        return data.get("contact", data)

    @staticmethod
    def _parse_birthday(birthday):
        """Split a birthday into (month, day, year).

        Args:
            birthday (str or date): 'YYYY-MM-DD' or 'MM-DD'.

        Returns:
            parts (tuple):  month, day, and year (or None).

        """
        if isinstance(birthday, date):
            return birthday.month, birthday.day, birthday.year
        parts = str(birthday).split('-')
        if len(parts) == 3:
            return parts[1], parts[2], parts[0]
        if len(parts) == 2:
            return parts[0], parts[1], None
        return None, None, None

    @staticmethod
    def _parse_time_zone(offset):
        """Undo YAML's base-60 reading of an unquoted UTC offset.

        YAML 1.1 loads '-7:00' as the integer -420 and '10:30' as 630.
        Integers beyond the '±14' hour range are minutes and are turned
        back into '±H:MM'.

        Args:
            offset (str or int):    the offset from the contact file.

        Returns:
            offset (str):   the offset as text.

        """
        if isinstance(offset, int) and not isinstance(offset, bool) \
                and abs(offset) > 14:
            sign = '-' if offset < 0 else '+'
            hours, minutes = divmod(abs(offset), 60)
            return f"{sign}{hours}:{minutes:02d}"
        return str(offset)

    def make_vcard(self, data):
        """Create a Vcard() from a contact description.

        Args:
            data (dict):    the parsed contact file.

        Returns:
            vcard (Vcard):  the populated vCard.

        """
        vcard = Vcard(
            data_dir=self.data_dir,
            default_area_code=self.default_area_code,
            default_timezone=self.default_timezone)

        if data.get('full_name'):
            vcard.add_full_name(data['full_name'])
        name = data.get('name')
        if name:
            vcard.add_name(
                name.get('last'),
                name.get('first'),
                name.get('additional'),
                name.get('prefixes'),
                name.get('suffixes'))
        if data.get('nicknames'):
            vcard.add_nicknames(data['nicknames'])
        if data.get('photo'):
            vcard.add_photo(data['photo'])
        elif data.get('photo_data'):
            vcard.add_photo(data['photo_data'], is_url=False)
        if data.get('birthday'):
            month, day, year = self._parse_birthday(data['birthday'])
            vcard.add_birthday(month, day, year)

        for entry in data.get('addresses') or []:
            vcard.add_address(
                entry.get('po_box'),
                entry.get('extended'),
                entry.get('street'),
                entry.get('city'),
                entry.get('state'),
                entry.get('zip_code'),
                entry.get('country'),
                entry.get('types') or ['intl', 'postal', 'parcel', 'work'])
        for entry in data.get('labels') or []:
            vcard.add_label(entry.get('label'), entry.get('types'))
        for entry in data.get('phones') or []:
            vcard.add_telephone(entry.get('number'), entry.get('types'))
        for entry in data.get('emails') or []:
            vcard.add_email(entry.get('email'), entry.get('types'))
        if data.get('mailer'):
            vcard.add_mailer(data['mailer'])

        if data.get('timezone') is not None:
            vcard.add_time_zone(self._parse_time_zone(data['timezone']))
        geo = data.get('geo')
        if geo:
            vcard.add_lat_long(geo.get('lat'), geo.get('long'))

        if data.get('title'):
            vcard.add_title(data['title'])
        if data.get('role'):
            vcard.add_role(data['role'])
        if data.get('logo'):
            vcard.add_logo(data['logo'])
        elif data.get('logo_data'):
            vcard.add_logo(data['logo_data'], is_url=False)
        if data.get('organizations'):
            vcard.add_organizations(data['organizations'])

        if data.get('categories'):
            vcard.add_categories(data['categories'])
        if data.get('note'):
            vcard.add_note(data['note'])
        vcard.add_product_id(data.get('product_id') or self.product_id)
        if data.get('revision'):
            vcard.add_revision(data['revision'])
        if data.get('sort_string'):
            vcard.add_sort_string(data['sort_string'])
        vcard.add_unique_identifier(data.get('uid'))
        for url in data.get('urls') or []:
            vcard.add_url(url)
        if data.get('classification'):
            vcard.add_classification(data['classification'])

        for entry in data.get('extended') or []:
            vcard.add_extended_type(entry.get('label'), entry.get('value'))
        if data.get('anniversary'):
            vcard.add_anniversary(data['anniversary'])
        if data.get('supervisor'):
            vcard.add_supervisor(data['supervisor'])
        if data.get('spouse'):
            vcard.add_spouse(data['spouse'])
        for child in data.get('children') or []:
            vcard.add_child(child)
        return vcard

    def build(self, filename, write=False, output=None):
        """Build a vCard from a contact file and print it or write it
        to the data directory.

        Args:
            filename (str): the YAML contact file.
            write (bool):   write the vCard to 'data_dir'.
            output (str):   Optional. Name of the written vCard file.

        """
        data = self._load_contact(filename)
        try:
            vcard = self.make_vcard(data)
            text = vcard.build(write=write, filename=output)
        except VcardError as exc:
            self._error_exit(exc.message)
        if write:
            print(f"vCard written to {self.data_dir}.")
        else:
            sys.stdout.write(text)

    def debug(self, filename):
        """Show the properties and defined fields produced by a
        contact file.

        Args:
            filename (str): the YAML contact file.

        """
        console = Console(no_color=self.disable_colors)
        data = self._load_contact(filename)
        try:
            vcard = self.make_vcard(data)
        except VcardError as exc:
            self._error_exit(exc.message)

        property_table = Table(
            title="Properties",
            title_justify="left",
            title_style=self.color_title,
            box=box.SIMPLE,
            show_header=True,
            show_lines=False,
            pad_edge=False)
        property_table.add_column("#", justify="right")
        property_table.add_column("field", style=self.color_key)
        property_table.add_column(
            "value", style=self.color_value, overflow="fold")
        for index, prop in enumerate(vcard.properties):
            property_table.add_row(str(index + 1), str(prop.key), prop.value)
        console.print(property_table)

        defined = ', '.join(sorted(str(key) for key in vcard.defined_fields))
        console.print(f"[{self.color_title}]Defined:[/{self.color_title}] "
                      f"{defined}")
        console.print(
            f"[{self.color_title}]Next item label:[/{self.color_title}] "
            f"item{vcard.extended_item_count}")


def parse_args(argv=None):
    """Parse command line arguments.

    Args:
        argv (list):    Optional. Arguments to parse instead of sys.argv.

    Returns:
        args (dict):    the command line arguments provided.

    """
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description='Terminal-based vCard builder for nerds.')
    parser._positionals.title = 'commands'
    parser.set_defaults(command=None)
    subparsers = parser.add_subparsers(
        metavar=f'(for more help: {APP_NAME} <command> -h)')
    build = subparsers.add_parser(
        'build',
        help='build a vCard from a contact file')
    build.add_argument(
        'filename',
        help='YAML contact file')
    build.add_argument(
        '-w',
        '--write',
        dest='write',
        action='store_true',
        help='write the vCard to the data directory')
    build.add_argument(
        '-o',
        '--output',
        dest='output',
        metavar='<name>',
        help='vCard filename (default: timestamp)')
    build.set_defaults(command='build')
    debug = subparsers.add_parser(
        'debug',
        help='show the properties built from a contact file')
    debug.add_argument(
        'filename',
        help='YAML contact file')
    debug.set_defaults(command='debug')
    version = subparsers.add_parser(
        'version',
        help='show version info')
    version.set_defaults(command='version')
    parser.add_argument(
        '-c',
        '--config',
        dest='config',
        metavar='<file>',
        help='config file')
    parser.add_argument(
        '-v',
        '--verbose',
        dest='verbose',
        action='store_true',
        help='show skipped fields and other details')
    args = parser.parse_args(argv)
    return parser, args


def main(argv=None):
    """Entry point. Parses arguments, creates Cards() object, calls
    requested method and parameters.

    """
    if os.environ.get("XDG_CONFIG_HOME"):
        config_file = os.path.join(
            os.path.expandvars(os.path.expanduser(
                os.environ["XDG_CONFIG_HOME"])), APP_NAME, "config")
    else:
        config_file = os.path.expandvars(
            os.path.expanduser(DEFAULT_CONFIG_FILE))

    if os.environ.get("XDG_DATA_HOME"):
        data_dir = os.path.join(
            os.path.expandvars(os.path.expanduser(
                os.environ["XDG_DATA_HOME"])), APP_NAME)
    else:
        data_dir = os.path.expandvars(
            os.path.expanduser(DEFAULT_DATA_DIR))

    parser, args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False)])

    if args.config:
        config_file = os.path.expandvars(
            os.path.expanduser(args.config))

    if not args.command:
        parser.print_help(sys.stderr)
        sys.exit(1)
    elif args.command == "version":
        print(f"{APP_NAME} {APP_VERS}")
        print(APP_COPYRIGHT)
        print(APP_LICENSE)
        return

    cards = Cards(
        config_file,
        data_dir,
        DEFAULT_CONFIG)

    if args.command == "build":
        cards.build(args.filename, write=args.write, output=args.output)
    elif args.command == "debug":
        cards.debug(args.filename)
    else:
        sys.exit(1)


def run():
    """Console script wrapper."""
    try:
        main()
    except KeyboardInterrupt:
        print("\nInterrupted.")
        sys.exit(1)


# entry point
if __name__ == "__main__":
    run()

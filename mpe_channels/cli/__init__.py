#!/usr/bin/env python
# PYTHON_ARGCOMPLETE_OK

import logging
import sys

import argcomplete

from mpe_channels.cli import arguments
from mpe_channels.config import Config

LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


def main():
    argv = sys.argv[1:]
    try:
        conf = Config()
        parser = arguments.get_root_parser(conf)
        argcomplete.autocomplete(parser)

        try:
            args = parser.parse_args(argv)
        except TypeError:
            args = parser.parse_args(argv + ["-h"])

        logging.basicConfig(level=LOG_LEVELS[min(args.verbose, len(LOG_LEVELS) - 1)],
                            format="%(asctime)s %(levelname)s %(name)s: %(message)s")
        getattr(args.cmd(conf, args), args.fn)()
    except Exception as e:
        if "--print-traceback" in argv:
            raise
        else:
            print("Error:", e)
            print("If you want to see full Traceback then run:")
            print("mpe-channels --print-traceback [parameters]")
            sys.exit(42)

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Application entrypoint for jn.

This file is intentionally minimal. It only hands over to the CLI.
"""
from __future__ import annotations

import sys

from jn.cli import main


if __name__ == "__main__":
    sys.exit(main())

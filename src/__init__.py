"""
LaunchDarkly Stale Flag Report

This package provides the command line entry point of the stale flag report.
It fetches live flags from LaunchDarkly, keeps the ones older than a threshold
and prints them grouped by maintainer.

Modules:
    ld_stale_flag_report: Main script and CLI interface
"""

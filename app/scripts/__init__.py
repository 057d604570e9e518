"""Command line maintenance scripts, installed as console entry points."""

# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Submission of job requests.

This module implements `portal submit`, which loads a job request from a YAML
file, applies overrides given on the command line, and submits the job to
Slurm through the configured scheduler gateway.
"""

# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Configuration system for portal.

This module defines dataclasses representing all configurable aspects of portal,
including environment variables, timeouts, the scheduler connection, the shared
workspace, the status poller, batch-script rendering, job request defaults,
presentation settings, and global defaults.

The `Config` class loads user configuration from a TOML file (if available)
and provides a globally accessible `CFG` instance.
"""

import os
import tomllib
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Self


@dataclass
class EnvironmentVariables:
    """Environment variable names used by portal."""

    # Enables portal debug mode.
    debug_mode: str = "PORTAL_DEBUG"
    # Path to an explicit portal config file.
    config_file: str = "PORTAL_CONFIG"
    # Name of the scheduler transport to use ('local' or 'ssh').
    scheduler_mode: str = "PORTAL_SCHEDULER_MODE"


@dataclass
class TimeoutSettings:
    """Timeout settings in seconds."""

    # Timeout for establishing an SSH connection in seconds.
    ssh: int = 60
    # Timeout for a single scheduler command (sbatch, squeue, ...) in seconds.
    command: int = 120


@dataclass
class SchedulerSettings:
    """Settings for connecting to the batch scheduler."""

    # Transport used to run scheduler commands ('local' or 'ssh').
    mode: str = "local"
    # Host running the scheduler commands when using ssh.
    ssh_host: str | None = None
    # Port of the ssh server.
    ssh_port: int = 22
    # User to log in as. If not set, ssh decides.
    ssh_user: str | None = None
    # Path to the private key used for authentication.
    ssh_key_path: str | None = None


@dataclass
class WorkspaceSettings:
    """Settings for the shared workspace holding job directories and job records."""

    # Root of the shared workspace. Must be visible to the scheduler's compute nodes.
    root: str = "/shared/hpc-portal"
    # Subdirectory of the root holding per-user job directories.
    users_dir: str = "users"
    # Subdirectory of the root holding the job store.
    store_dir: str = "store"
    # Name of the rendered batch script inside a job's working directory.
    script_name: str = "job.sh"

    @property
    def store_path(self) -> Path:
        """Path to the job store."""
        return Path(self.root) / self.store_dir

    def jobDirectory(self, user: str, job_id: str) -> Path:
        """Path to the working directory of the specified job."""
        return Path(self.root) / self.users_dir / user / "jobs" / job_id


@dataclass
class PollerSettings:
    """Settings for the status poller."""

    # Interval (in seconds) between the starts of successive poll cycles.
    interval: int = 60
    # Maximal number of jobs queried concurrently within one poll cycle.
    max_workers: int = 8


@dataclass
class ScriptSettings:
    """Settings for rendering batch scripts."""

    # First line of every batch script.
    shebang: str = "#!/bin/bash"
    # Name of the file capturing standard output (`%j` is replaced by Slurm with the job id).
    stdout_pattern: str = "slurm-%j.out"
    # Name of the file capturing standard error.
    stderr_pattern: str = "slurm-%j.err"
    # Line making `conda activate` available in a non-interactive shell.
    conda_hook: str = "source $(conda info --base)/etc/profile.d/conda.sh"
    # Prefix of the main command for container jobs.
    container_exec: str = "singularity exec $SINGULARITY_IMAGE"


@dataclass
class RequestDefaults:
    """Default values for fields omitted from a job request."""

    nodes: int = 1
    tasks_per_node: int = 1
    cpus_per_task: int = 1
    mem_per_node_gb: int = 4
    gpus_per_node: int = 0
    priority: int = 0
    # Shortest walltime (in seconds) accepted for a job.
    min_walltime: int = 60


@dataclass
class JobsPresenterSettings:
    """Settings for JobsPresenter."""

    # Maximal width of the jobs panel.
    max_width: int | None = None
    # Minimal width of the jobs panel.
    min_width: int | None = 80
    # Maximum displayed length of a job name before truncation.
    max_job_name_length: int = 20
    # Style used for border lines.
    border_style: str = "white"
    # Style used for the title.
    title_style: str = "white bold"
    # Style used for table headers.
    headers_style: str = "default"
    # Style used for table values.
    main_style: str = "white"
    # Style used for statistics.
    secondary_style: str = "grey70"
    # Style used for failed exit codes.
    strong_warning_style: str = "bright_red"
    # Style used for extra notes.
    extra_info_style: str = "grey50"


@dataclass
class QueuesPresenterSettings:
    """Settings for QueuesPresenter."""

    # Maximal width of the queues panel.
    max_width: int | None = None
    # Minimal width of the queues panel.
    min_width: int | None = 60
    # Style used for border lines.
    border_style: str = "white"
    # Style used for the title.
    title_style: str = "white bold"
    # Style used for table headers.
    headers_style: str = "default"
    # Mark used to denote queues.
    mark: str = "●"
    # Style used for the mark if the queue is up.
    available_mark_style: str = "bright_green"
    # Style used for the mark if the queue is not up.
    unavailable_mark_style: str = "bright_red"
    # Style used for queue information.
    main_text_style: str = "white"


@dataclass
class InfoPresenterSettings:
    """Settings for InfoPresenter."""

    # Maximal width of the job info panel.
    max_width: int | None = None
    # Minimal width of the job info panel.
    min_width: int | None = 80
    # Style of the border lines.
    border_style: str = "white"
    # Style of the title.
    title_style: str = "white bold"
    # Style of the separators between individual sections of the panel.
    rule_style: str = "white"
    # Style used for the keys.
    key_style: str = "default bold"
    # Style used for the values.
    value_style: str = "white"
    # Style used for notes.
    notes_style: str = "grey50"


@dataclass
class DateFormats:
    """Date and time format strings."""

    # Standard date format used by portal.
    standard: str = "%Y-%m-%d %H:%M:%S"
    # Date format used by Slurm.
    slurm: str = "%Y-%m-%dT%H:%M:%S"


@dataclass
class ExitCodes:
    """Exit codes used for various errors."""

    # Default error code for failures of portal commands.
    default: int = 91
    # Returned on an unexpected or unhandled error.
    unexpected_error: int = 99


@dataclass
class StateColors:
    """Color scheme for JobStatus display."""

    submitted: str = "bright_yellow"
    queued: str = "bright_magenta"
    running: str = "bright_blue"
    completed: str = "bright_green"
    failed: str = "bright_red"
    cancelled: str = "bright_red"
    # Style used for the total number of jobs.
    sum: str = "white"


@dataclass
class Config:
    """Main configuration for portal."""

    env_vars: EnvironmentVariables = field(default_factory=EnvironmentVariables)
    timeouts: TimeoutSettings = field(default_factory=TimeoutSettings)
    scheduler: SchedulerSettings = field(default_factory=SchedulerSettings)
    workspace: WorkspaceSettings = field(default_factory=WorkspaceSettings)
    poller: PollerSettings = field(default_factory=PollerSettings)
    script: ScriptSettings = field(default_factory=ScriptSettings)
    request_defaults: RequestDefaults = field(default_factory=RequestDefaults)
    jobs_presenter: JobsPresenterSettings = field(default_factory=JobsPresenterSettings)
    queues_presenter: QueuesPresenterSettings = field(
        default_factory=QueuesPresenterSettings
    )
    info_presenter: InfoPresenterSettings = field(default_factory=InfoPresenterSettings)
    date_formats: DateFormats = field(default_factory=DateFormats)
    exit_codes: ExitCodes = field(default_factory=ExitCodes)
    state_colors: StateColors = field(default_factory=StateColors)

    # Name of the portal binary.
    binary_name: str = "portal"

    @classmethod
    def load(cls, config_path: Path | None = None) -> Self:
        """
        Load configuration from TOML file or use defaults.

        Args:
            config_path: Explicit path to config file. If None, searches standard locations.

        Returns:
            Config instance with loaded or default values.
        """
        if config_path is None:
            config_path = Config._get_config_path()

        try:
            if config_path and config_path.exists():
                with config_path.open("rb") as f:
                    config_data = tomllib.load(f)
                return _dict_to_dataclass(cls, config_data)
        except Exception as e:
            raise ValueError(f"Could not read portal config '{config_path}': {e}.")

        # no config found - use defaults
        return cls()

    @staticmethod
    def _get_config_path() -> Path | None:
        """
        Search for config file in standard locations (XDG compliant).
        Returns the first existing config file, or None.
        """
        config_locations: list[Path | None] = [
            # 1. Explicit environment variable (highest priority)
            Path(env_path)
            if (env_path := os.getenv(EnvironmentVariables.config_file))
            else None,
            # 2. Current working directory (for development/override)
            Path.cwd() / "portal_config.toml",
            # 3. XDG config home (standard user config location)
            Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config"))
            / "portal"
            / "config.toml",
        ]

        for path in config_locations:
            if path and path.is_file():
                return path

        return None


def _dict_to_dataclass(cls, data: dict[str, Any]):
    """
    Recursively convert a dictionary to a dataclass instance.
    Handles nested dataclasses properly.
    """
    if not is_dataclass(cls):
        return data

    field_values = {}
    for field_info in fields(cls):
        field_name = field_info.name
        field_type = field_info.type

        if field_name in data:
            value = data[field_name]
            if is_dataclass(field_type) and isinstance(value, dict):
                field_values[field_name] = _dict_to_dataclass(field_type, value)
            else:
                field_values[field_name] = value

    return cls(**field_values)


# Global configuration for portal.
CFG = Config.load()

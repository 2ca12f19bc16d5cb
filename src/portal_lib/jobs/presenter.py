# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from tabulate import Line, TableFormat, tabulate

from portal_lib.core.common import format_duration, get_panel_width
from portal_lib.core.config import CFG
from portal_lib.properties.job import Job
from portal_lib.properties.states import JobStatus


class JobsPresenter:
    """
    Present information about a collection of portal jobs and their statistics.
    """

    # Mapping of human-readable color names to ANSI escape codes.
    _ANSI_COLORS = {
        # default
        "default": "",
        # standard colors
        "red": "\033[31m",
        "green": "\033[32m",
        "yellow": "\033[33m",
        "blue": "\033[34m",
        "magenta": "\033[35m",
        "white": "\033[37m",
        # bright colors
        "bright_red": "\033[91m",
        "bright_green": "\033[92m",
        "bright_yellow": "\033[93m",
        "bright_blue": "\033[94m",
        "bright_magenta": "\033[95m",
        "bright_white": "\033[97m",
        # other colors
        "grey70": "\033[38;5;249m",
        "grey50": "\033[38;5;244m",
        # bold:
        "bold": "\033[1m",
        # reset
        "reset": "\033[0m",
    }

    # Table formatting configuration for `tabulate`.
    _COMPACT_TABLE = TableFormat(
        lineabove=Line("", "", "", ""),
        linebelowheader="",
        linebetweenrows="",
        linebelow=Line("", "", "", ""),
        headerrow=("", " ", ""),
        datarow=("", " ", ""),
        padding=0,
        with_header_hide=["lineabove", "linebelow"],
    )

    # Number of characters of the internal job id shown in the table.
    _SHORT_ID_LENGTH = 8

    def __init__(self, jobs: list[Job], extra: bool, all: bool):
        """
        Initialize the presenter with a list of jobs.

        Args:
            jobs (list[Job]): Jobs to be presented.
            extra (bool): Should show additional info about jobs.
            all (bool): Jobs in terminal states are included.
        """
        self._jobs = jobs
        self._stats = JobsStatistics()
        self._extra = extra
        self._all = all

    def createJobsInfoPanel(self, console: Console | None = None) -> Group:
        """
        Create a Rich panel displaying job information and statistics.

        Args:
            console (Console | None): Optional Rich Console instance.
                If None, a new Console will be created.

        Returns:
            Group: Rich Group containing the jobs table and stats panel.
        """
        console = console or Console()

        jobs_table = self._createBasicJobsTable()
        if self._extra:
            jobs_table = self._insertExtraInfo(jobs_table)

        # convert ANSI codes to Rich Text
        content = Group(
            Text.from_ansi(jobs_table),
            Text(""),
            self._stats.createStatsPanel(),
        )

        panel = Panel(
            content,
            title=Text(
                "PORTAL JOBS", style=CFG.jobs_presenter.title_style, justify="center"
            ),
            border_style=CFG.jobs_presenter.border_style,
            padding=(1, 1),
            width=get_panel_width(
                console, 1, CFG.jobs_presenter.min_width, CFG.jobs_presenter.max_width
            ),
            expand=False,
        )

        return Group(Text(""), panel, Text(""))

    def dumpYaml(self) -> None:
        """
        Print the YAML representation of all jobs to stdout.
        """
        for job in self._jobs:
            print(job.toYaml())

    def _createBasicJobsTable(self) -> str:
        """
        Build a compact tabulated string representation of the job list.

        Uses `tabulate` since Rich's Table is slow for large numbers of rows.
        Updates job statistics via `self._stats`.
        """
        headers = [
            "S",
            "Job ID",
            "Slurm ID",
            "User",
            "Job Name",
            "Queue",
            "NCPUs",
            "NGPUs",
            "NNodes",
            "Times",
        ]
        if self._all:
            headers.append("Exit")

        rows = [self._createJobRow(job) for job in self._jobs]

        return tabulate(
            rows,
            headers=[
                JobsPresenter._color(h, color=CFG.jobs_presenter.headers_style, bold=True)
                for h in headers
            ],
            tablefmt=JobsPresenter._COMPACT_TABLE,
            stralign="center",
            numalign="center",
        )

    def _createJobRow(self, job: Job) -> list[str]:
        """
        Create a single row of job data.
        """
        res = job.resources
        self._stats.addJob(job.status, res.total_cpus, res.total_gpus, res.nodes)

        row = [
            JobsPresenter._color(job.status.toCode(), job.status.color),
            JobsPresenter._mainColor(job.id[: JobsPresenter._SHORT_ID_LENGTH]),
            JobsPresenter._mainColor(job.external_id or ""),
            JobsPresenter._mainColor(job.user),
            JobsPresenter._mainColor(JobsPresenter._shortenJobName(job.name)),
            JobsPresenter._mainColor(res.queue),
            JobsPresenter._mainColor(str(res.total_cpus)),
            JobsPresenter._mainColor(str(res.total_gpus)),
            JobsPresenter._mainColor(str(res.nodes)),
            JobsPresenter._formatTime(job),
        ]
        if self._all:
            row.append(JobsPresenter._formatExitCode(job))

        return row

    def _insertExtraInfo(self, table: str) -> str:
        """
        Augment a formatted job table with the working directory and description of each job.
        """
        split_table = table.splitlines()
        table_with_extra_info = split_table[0] + "\n"

        for line, job in zip(split_table[1:], self._jobs):
            table_with_extra_info += line + "\n"

            if job.working_directory:
                table_with_extra_info += JobsPresenter._color(
                    f" >   Working directory: {job.working_directory}\n",
                    CFG.jobs_presenter.extra_info_style,
                )

            if job.status_reason:
                table_with_extra_info += JobsPresenter._color(
                    f" >   Reason:            {job.status_reason}\n",
                    CFG.jobs_presenter.extra_info_style,
                )

            if job.description:
                table_with_extra_info += JobsPresenter._color(
                    f" >   Description:       {job.description}\n",
                    CFG.jobs_presenter.extra_info_style,
                )
            table_with_extra_info += "\n"

        return table_with_extra_info

    @staticmethod
    def _formatTime(job: Job) -> str:
        """
        Format the time the job spent queued or running, or the time it finished.
        """
        match job.status:
            case JobStatus.COMPLETED | JobStatus.FAILED | JobStatus.CANCELLED:
                if job.end_time is None:
                    return ""
                return JobsPresenter._color(
                    job.end_time.strftime(CFG.date_formats.standard),
                    color=job.status.color,
                )
            case JobStatus.RUNNING:
                start = job.start_time or job.submission_time
                return JobsPresenter._color(
                    format_duration(datetime.now() - start), color=job.status.color
                ) + JobsPresenter._mainColor(
                    f" / {format_duration(timedelta(seconds=job.resources.walltime))}"
                )
            case _:
                return JobsPresenter._color(
                    format_duration(datetime.now() - job.submission_time),
                    color=job.status.color,
                )

    @staticmethod
    def _formatExitCode(job: Job) -> str:
        """
        Get formatted exit code of a finished job. Empty string if it is not known.
        """
        if job.exit_code is None or not job.status.isTerminal():
            return ""

        if job.exit_code == 0:
            return JobsPresenter._mainColor(str(job.exit_code))

        return JobsPresenter._color(
            str(job.exit_code), color=CFG.jobs_presenter.strong_warning_style
        )

    @staticmethod
    def _shortenJobName(job_name: str) -> str:
        """
        Truncate a job name if it exceeds the maximum allowed display length.
        """
        if len(job_name) > CFG.jobs_presenter.max_job_name_length:
            return f"{job_name[: CFG.jobs_presenter.max_job_name_length]}…"

        return job_name

    @staticmethod
    def _color(string: str, color: str | None = None, bold: bool = False) -> str:
        """
        Apply ANSI color codes and optional bold styling to a string.

        Args:
            string (str): The string to colorize.
            color (str | None): Optional color.
            bold (bool): Whether to apply bold formatting.

        Returns:
            str: ANSI-colored and optionally bolded string.
        """
        return f"{JobsPresenter._ANSI_COLORS['bold'] if bold else ''}{JobsPresenter._ANSI_COLORS.get(color, '') if color else ''}{string}{JobsPresenter._ANSI_COLORS['reset'] if color or bold else ''}"

    @staticmethod
    def _mainColor(string: str, bold: bool = False) -> str:
        """
        Apply the main presenter color with optional bold styling.
        """
        return JobsPresenter._color(string, CFG.jobs_presenter.main_style, bold)


@dataclass
class JobsStatistics:
    """
    Dataclass for collecting statistics about jobs.
    """

    # Number of jobs in the individual states.
    n_jobs: dict[JobStatus, int] = field(default_factory=dict)

    # Number of CPUs of queued jobs.
    n_requested_cpus: int = 0

    # Number of CPUs of running jobs.
    n_allocated_cpus: int = 0

    # Number of GPUs of queued jobs.
    n_requested_gpus: int = 0

    # Number of GPUs of running jobs.
    n_allocated_gpus: int = 0

    # Number of nodes of queued jobs.
    n_requested_nodes: int = 0

    # Number of nodes of running jobs.
    n_allocated_nodes: int = 0

    def addJob(self, state: JobStatus, cpus: int, gpus: int, nodes: int) -> None:
        """
        Update the collected resources based on the state of the job.

        Resources of SUBMITTED and QUEUED jobs are counted as requested,
        resources of RUNNING jobs as allocated. Finished jobs are only counted.
        """
        self.n_jobs[state] = self.n_jobs.get(state, 0) + 1

        if state in {JobStatus.SUBMITTED, JobStatus.QUEUED}:
            self.n_requested_cpus += cpus
            self.n_requested_gpus += gpus
            self.n_requested_nodes += nodes
        elif state == JobStatus.RUNNING:
            self.n_allocated_cpus += cpus
            self.n_allocated_gpus += gpus
            self.n_allocated_nodes += nodes

    def createStatsPanel(self) -> Group:
        """
        Build a Rich Group containing job statistics sections.
        """
        table = Table.grid(expand=False)
        table.add_column(justify="left")
        # spacer column
        table.add_column(justify="center", width=5)
        table.add_column(justify="right")

        table.add_row(
            self._createJobStatesStats(), "", self._createResourcesStatsTable()
        )

        return Group(table)

    def _createJobStatesStats(self) -> Text:
        """
        Generate Rich Text summarizing the number of jobs in each state.
        """
        spacing = "    "
        line = Text(spacing)
        line.append(
            JobsStatistics._colorText(
                f"\n\n Jobs{spacing}", color=CFG.jobs_presenter.secondary_style, bold=True
            )
        )

        total = 0
        for state in JobStatus:
            if count := self.n_jobs.get(state):
                total += count
                line.append(
                    JobsStatistics._colorText(
                        f"{state.toCode()} ", color=state.color, bold=True
                    )
                )
                line.append(
                    JobsStatistics._colorText(
                        str(count), color=CFG.jobs_presenter.secondary_style
                    )
                )
                line.append(spacing)

        line.append(JobsStatistics._colorText("Σ ", color=CFG.state_colors.sum, bold=True))
        line.append(
            JobsStatistics._colorText(str(total), color=CFG.jobs_presenter.secondary_style)
        )
        line.append(spacing)

        return line

    def _createResourcesStatsTable(self) -> Table:
        """
        Create a Rich Table summarizing requested and allocated resources.
        """
        style = CFG.jobs_presenter.secondary_style
        table = Table(show_header=True, box=None, padding=(0, 1))

        table.add_column("", justify="left")
        for header in ("CPUs", "GPUs", "Nodes"):
            table.add_column(JobsStatistics._colorText(header, style), justify="center")

        table.add_row(
            JobsStatistics._colorText("Requested", style, bold=True),
            JobsStatistics._colorText(str(self.n_requested_cpus), style),
            JobsStatistics._colorText(str(self.n_requested_gpus), style),
            JobsStatistics._colorText(str(self.n_requested_nodes), style),
        )
        table.add_row(
            JobsStatistics._colorText("Allocated", style, bold=True),
            JobsStatistics._colorText(str(self.n_allocated_cpus), style),
            JobsStatistics._colorText(str(self.n_allocated_gpus), style),
            JobsStatistics._colorText(str(self.n_allocated_nodes), style),
        )

        return table

    @staticmethod
    def _colorText(string: str, color: str | None = None, bold: bool = False) -> Text:
        """
        Create Rich Text with optional color and bold formatting.
        """
        return Text(string, style=f"{color if color else ''} {'bold' if bold else ''}")

# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from datetime import datetime, timedelta

import yaml
from rich.console import Console, Group
from rich.padding import Padding
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from portal_lib.core.common import format_duration, get_panel_width, load_yaml_dumper
from portal_lib.core.config import CFG
from portal_lib.properties.environment import environment_to_dict
from portal_lib.properties.job import Job, JobEvent, UsageRecord

Dumper: type[yaml.Dumper] = load_yaml_dumper()


class InfoPresenter:
    """
    Presentation layer for information about a single job.
    """

    def __init__(
        self, job: Job, events: list[JobEvent], usage: UsageRecord | None = None
    ):
        """
        Args:
            job (Job): The job to present.
            events (list[JobEvent]): Event log of the job, oldest first.
            usage (UsageRecord | None): Usage record of the job, if any.
        """
        self._job = job
        self._events = events
        self._usage = usage

    def dumpYaml(self) -> None:
        """
        Print the YAML representation of the job, its events, and its usage to stdout.
        """
        data = {
            "job": self._job.toDict(),
            "events": [e.toDict() for e in self._events],
        }
        if self._usage:
            data["usage"] = self._usage.toDict()

        print(yaml.dump(data, default_flow_style=False, sort_keys=False, Dumper=Dumper))

    def getShortInfo(self) -> Text:
        """
        Return a concise, colorized summary of the job's current state.
        """
        return (
            Text(self._job.id)
            + "    "
            + Text(str(self._job.status), style=self._job.status.color)
        )

    def createFullInfoPanel(self, console: Console | None = None) -> Group:
        """
        Create a full job information panel.

        Args:
            console (Console | None): Optional Rich console.
                If not provided, a new Console is created.

        Returns:
            Group: A Rich Group containing the full job info panel.
        """
        console = console or Console()

        sections = [
            Padding(self._createBasicInfoTable(), (0, 2)),
            *self._section("RESOURCES", self._createResourcesTable()),
            *self._section("ENVIRONMENT", self._createEnvironmentTable()),
            *self._section("HISTORY", self._createHistoryTable()),
        ]
        if self._usage:
            sections.extend(self._section("USAGE", self._createUsageTable()))
        sections.extend(self._section("STATE", self._createStateTable()))

        panel = Panel(
            Group(*sections),
            title=Text(
                f"JOB: {self._job.id}",
                style=CFG.info_presenter.title_style,
                justify="center",
            ),
            border_style=CFG.info_presenter.border_style,
            # no horizontal padding so Rule reaches borders
            padding=(1, 0),
            width=get_panel_width(
                console,
                2,
                CFG.info_presenter.min_width,
                CFG.info_presenter.max_width,
            ),
        )

        return Group(Text(""), panel, Text(""))

    @staticmethod
    def _section(title: str, content: Table) -> list:
        """
        Return the renderables of a titled panel section.
        """
        return [
            Text(""),
            Rule(
                title=Text(title, style=CFG.info_presenter.title_style),
                style=CFG.info_presenter.rule_style,
            ),
            Text(""),
            Padding(content, (0, 2)),
        ]

    @staticmethod
    def _keyValueTable() -> Table:
        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column(justify="right", style=CFG.info_presenter.key_style, no_wrap=True)
        table.add_column(
            justify="left", overflow="fold", style=CFG.info_presenter.value_style
        )
        return table

    def _createBasicInfoTable(self) -> Table:
        """
        Create a table with basic job information.
        """
        job = self._job
        table = InfoPresenter._keyValueTable()

        table.add_row("Job name:", Text(job.name))
        table.add_row("User:", Text(job.user))
        if job.description:
            table.add_row("Description:", Text(job.description))
        if job.external_id:
            table.add_row("Slurm job ID:", Text(job.external_id))
        if job.working_directory:
            table.add_row("Working directory:", Text(str(job.working_directory)))

        command = f"{job.command} {job.arguments}" if job.arguments else job.command
        table.add_row("Command:", Text(command))
        if job.pre_script:
            table.add_row("Pre-script:", Text(job.pre_script))
        if job.post_script:
            table.add_row("Post-script:", Text(job.post_script))

        return table

    def _createResourcesTable(self) -> Table:
        """
        Create a table displaying the job's resource requirements.
        """
        res = self._job.resources
        table = InfoPresenter._keyValueTable()

        table.add_row("queue:", Text(res.queue))
        table.add_row("walltime:", Text(format_duration(timedelta(seconds=res.walltime))))
        table.add_row("nodes:", Text(str(res.nodes)))
        table.add_row("tasks-per-node:", Text(str(res.tasks_per_node)))
        table.add_row("cpus-per-task:", Text(str(res.cpus_per_task)))
        table.add_row("mem-per-node:", Text(f"{res.mem_per_node_gb} GB"))
        if res.gpus_per_node:
            table.add_row("gpus-per-node:", Text(str(res.gpus_per_node)))
        if res.priority:
            table.add_row("priority:", Text(str(res.priority)))

        return table

    def _createEnvironmentTable(self) -> Table:
        """
        Create a table describing the job's execution environment.
        """
        env = environment_to_dict(self._job.environment)
        table = InfoPresenter._keyValueTable()

        table.add_row("kind:", Text(env["kind"].lower()))  # ty: ignore[possibly-missing-attribute]
        for key, value in env["config"].items():  # ty: ignore[possibly-missing-attribute]
            if isinstance(value, list):
                value = ", ".join(value)
            table.add_row(f"{key.replace('_', '-')}:", Text(str(value)))

        return table

    def _createHistoryTable(self) -> Table:
        """
        Create a table listing the events of the job.
        """
        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column(justify="right", style=CFG.info_presenter.notes_style, no_wrap=True)
        table.add_column(justify="left", no_wrap=True)
        table.add_column(justify="left", overflow="fold", style=CFG.info_presenter.value_style)

        table.add_row(
            self._job.submission_time.strftime(CFG.date_formats.standard),
            Text("CREATED", style=CFG.info_presenter.key_style),
            Text(""),
        )
        for event in self._events:
            table.add_row(
                event.timestamp.strftime(CFG.date_formats.standard),
                Text(str(event.kind), style=CFG.info_presenter.key_style),
                Text(event.message),
            )

        return table

    def _createUsageTable(self) -> Table:
        """
        Create a table with the billable usage of the job.
        """
        usage = self._usage
        table = InfoPresenter._keyValueTable()

        table.add_row("Runtime:", Text(format_duration(timedelta(seconds=usage.walltime_seconds))))  # ty: ignore[possibly-missing-attribute]
        table.add_row("CPU-hours:", Text(f"{usage.cpu_hours:.2f}"))  # ty: ignore[possibly-missing-attribute]
        table.add_row("GPU-hours:", Text(f"{usage.gpu_hours:.2f}"))  # ty: ignore[possibly-missing-attribute]

        return table

    def _createStateTable(self) -> Table:
        """
        Create a table with the current state of the job.
        """
        job = self._job
        table = InfoPresenter._keyValueTable()

        table.add_row(
            "State:", Text(str(job.status), style=f"{job.status.color} bold")
        )
        if job.status_reason:
            table.add_row(
                "Reason:", Text(job.status_reason, style=CFG.info_presenter.notes_style)
            )
        if job.start_time:
            table.add_row("Started:", Text(job.start_time.strftime(CFG.date_formats.standard)))
        if job.end_time:
            table.add_row("Finished:", Text(job.end_time.strftime(CFG.date_formats.standard)))
        elif job.start_time:
            table.add_row("Running for:", Text(format_duration(datetime.now() - job.start_time)))
        if job.exit_code is not None:
            table.add_row("Exit code:", Text(str(job.exit_code)))

        return table

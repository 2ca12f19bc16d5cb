# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from portal_lib.batch.interface import QueueInfo
from portal_lib.core.common import get_panel_width
from portal_lib.core.config import CFG


class QueuesPresenter:
    """
    Presents information about partitions of the scheduler.
    """

    def __init__(self, queues: list[QueueInfo]):
        """
        Args:
            queues (list[QueueInfo]): List of queues to be presented.
        """
        self._queues = queues

    def dumpYaml(self) -> None:
        """
        Print the YAML representation of all queues to stdout.
        """
        for queue in self._queues:
            print(queue.toYaml())

    def createQueuesInfoPanel(self, console: Console | None = None) -> Group:
        """
        Create a Rich panel displaying queue information.

        Args:
            console (Console | None): Optional Rich Console instance.
                If None, a new Console will be created.

        Returns:
            Group: Rich Group containing the queues table.
        """
        console = console or Console()

        panel = Panel(
            self._createQueuesTable(),
            title=Text(
                "QUEUES",
                style=CFG.queues_presenter.title_style,
                justify="center",
            ),
            border_style=CFG.queues_presenter.border_style,
            padding=(1, 1),
            width=get_panel_width(
                console,
                1,
                CFG.queues_presenter.min_width,
                CFG.queues_presenter.max_width,
            ),
            expand=False,
        )

        return Group(Text(""), panel, Text(""))

    def _createQueuesTable(self) -> Table:
        """
        Construct a Rich Table with one row per queue.
        """
        table = Table(
            show_header=True,
            box=None,
            padding=(0, 1),
        )

        table.add_column(justify="left")
        for header, justify in (
            ("Name", "left"),
            ("State", "center"),
            ("Nodes", "right"),
            ("CPUs", "right"),
        ):
            table.add_column(
                header=Text(
                    header, justify="center", style=CFG.queues_presenter.headers_style
                ),
                justify=justify,
            )

        for queue in self._queues:
            QueuesPresenter._addQueueRow(queue, table)

        return table

    @staticmethod
    def _addQueueRow(queue: QueueInfo, table: Table) -> None:
        """
        Add a row describing the queue to the table.
        """
        mark_style = (
            CFG.queues_presenter.available_mark_style
            if queue.isAvailable()
            else CFG.queues_presenter.unavailable_mark_style
        )
        style = CFG.queues_presenter.main_text_style

        table.add_row(
            Text(CFG.queues_presenter.mark, style=mark_style),
            Text(queue.name, style=style),
            Text(queue.state, style=style),
            Text(str(queue.nodes), style=style),
            Text(str(queue.cpus), style=style),
        )

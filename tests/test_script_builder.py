# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from datetime import datetime
from pathlib import Path

import pytest

from portal_lib.core.config import CFG
from portal_lib.core.error import PortalError
from portal_lib.properties.environment import (
    CondaEnvironment,
    ContainerEnvironment,
    ModulesEnvironment,
    RawEnvironment,
)
from portal_lib.properties.job import Job
from portal_lib.properties.resources import Resources
from portal_lib.properties.states import JobStatus
from portal_lib.script import ScriptBuilder


def _job(**kwargs) -> Job:
    params = {
        "id": "a1b2c3",
        "name": "train",
        "user": "alice",
        "resources": Resources(
            queue="gpu",
            walltime=3661,
            nodes=2,
            tasks_per_node=4,
            cpus_per_task=2,
            mem_per_node_gb=16,
        ),
        "environment": RawEnvironment(),
        "command": "python train.py",
        "status": JobStatus.SUBMITTED,
        "submission_time": datetime(2025, 3, 1, 12, 0, 0),
        "working_directory": Path("/work/a1b2c3"),
    }
    params.update(kwargs)
    return Job(**params)


def test_render_full_script():
    job = _job(
        environment=ModulesEnvironment(modules=["gcc/12", "openmpi/4"]),
        arguments="--epochs 10",
        pre_script="echo start",
        post_script="echo done",
    )

    assert ScriptBuilder.render(job) == "\n".join(
        [
            "#!/bin/bash",
            "",
            "#SBATCH --job-name=train",
            "#SBATCH --partition=gpu",
            "#SBATCH --nodes=2",
            "#SBATCH --ntasks=8",
            "#SBATCH --cpus-per-task=2",
            "#SBATCH --mem=16G",
            "#SBATCH --time=01:01:01",
            "#SBATCH --output=/work/a1b2c3/slurm-%j.out",
            "#SBATCH --error=/work/a1b2c3/slurm-%j.err",
            "",
            "# Environment Setup",
            "module purge",
            "module load gcc/12",
            "module load openmpi/4",
            "",
            "# Pre-job commands",
            "echo start",
            "",
            "cd /work/a1b2c3",
            "",
            "# Main job command",
            "python train.py --epochs 10",
            "",
            "# Post-job commands",
            "echo done",
            "",
        ]
    )


def test_render_script_ends_with_newline_and_shebang_first():
    script = ScriptBuilder.render(_job())

    assert script.startswith(CFG.script.shebang + "\n")
    assert script.endswith("\n")
    assert "# Pre-job commands" not in script
    assert "# Post-job commands" not in script


@pytest.mark.parametrize("gpus, present", [(0, False), (2, True)])
def test_render_gpu_directive(gpus, present):
    job = _job(resources=Resources(queue="gpu", walltime=3600, gpus_per_node=gpus))

    script = ScriptBuilder.render(job)

    assert ("#SBATCH --gres=gpu:2" in script) is present
    assert ("--gres" in script) is present


@pytest.mark.parametrize("priority, present", [(0, False), (10, True)])
def test_render_priority_directive(priority, present):
    job = _job(resources=Resources(queue="cpu", walltime=3600, priority=priority))

    assert ("#SBATCH --priority=10" in ScriptBuilder.render(job)) is present


def test_render_long_walltime():
    job = _job(resources=Resources(queue="long", walltime=360000))

    assert "#SBATCH --time=100:00:00" in ScriptBuilder.render(job)


def test_render_conda_environment():
    script = ScriptBuilder.render(_job(environment=CondaEnvironment(env_name="ml")))

    assert f"{CFG.script.conda_hook}\nconda activate ml\n" in script


def test_render_container_environment_wraps_command():
    job = _job(
        environment=ContainerEnvironment(image="/img/tool.sif", bind_paths=["/data", "/scratch"]),
        arguments="-v",
    )

    script = ScriptBuilder.render(job)

    assert "export SINGULARITY_IMAGE=/img/tool.sif\n" in script
    assert 'export SINGULARITY_BINDPATH="/data,/scratch"\n' in script
    assert "singularity exec $SINGULARITY_IMAGE python train.py -v\n" in script


def test_render_container_environment_without_bind_paths():
    script = ScriptBuilder.render(
        _job(environment=ContainerEnvironment(image="/img/tool.sif"))
    )

    assert "SINGULARITY_BINDPATH" not in script


def test_render_raw_environment():
    script = ScriptBuilder.render(
        _job(environment=RawEnvironment(commands="export OMP_NUM_THREADS=8"))
    )

    assert "# Environment Setup\nexport OMP_NUM_THREADS=8\n\n" in script


def test_render_empty_raw_environment():
    assert "# Environment Setup\n\ncd /work/a1b2c3" in ScriptBuilder.render(_job())


def test_render_without_working_directory_raises():
    with pytest.raises(PortalError, match="working directory is not set"):
        ScriptBuilder.render(_job(working_directory=None))

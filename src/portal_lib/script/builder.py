# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


from portal_lib.core.common import seconds_to_hhmmss
from portal_lib.core.config import CFG
from portal_lib.core.error import PortalError
from portal_lib.properties.environment import (
    CondaEnvironment,
    ContainerEnvironment,
    Environment,
    ModulesEnvironment,
    RawEnvironment,
)
from portal_lib.properties.job import Job


class ScriptBuilder:
    """
    Translates jobs into Slurm batch scripts.
    """

    @staticmethod
    def render(job: Job) -> str:
        """
        Render the batch script of a job.

        The script consists of the shebang, one `#SBATCH` directive per resource,
        the environment setup, the optional pre-script, a `cd` into the working
        directory, the main command, and the optional post-script.

        Args:
            job (Job): The job to render. Its working directory must be set.

        Returns:
            str: Text of the batch script.

        Raises:
            PortalError: If the working directory of the job is not set.
        """
        if job.working_directory is None:
            raise PortalError(
                f"Cannot render the script of job '{job.id}': working directory is not set."
            )

        lines = [CFG.script.shebang, ""]
        lines.extend(ScriptBuilder._renderDirectives(job))
        lines.append("")

        lines.append("# Environment Setup")
        lines.extend(ScriptBuilder._renderEnvironment(job.environment))
        lines.append("")

        if job.pre_script:
            lines.extend(["# Pre-job commands", job.pre_script, ""])

        lines.extend([f"cd {job.working_directory}", ""])
        lines.extend(["# Main job command", ScriptBuilder._renderMainCommand(job), ""])

        if job.post_script:
            lines.extend(["# Post-job commands", job.post_script, ""])

        return "\n".join(lines)

    @staticmethod
    def _renderDirectives(job: Job) -> list[str]:
        """
        Render the `#SBATCH` directives requesting the job's resources.
        """
        res = job.resources
        directives = [
            f"--job-name={job.name}",
            f"--partition={res.queue}",
            f"--nodes={res.nodes}",
            f"--ntasks={res.total_tasks}",
            f"--cpus-per-task={res.cpus_per_task}",
            f"--mem={res.mem_per_node_gb}G",
        ]

        if res.gpus_per_node > 0:
            directives.append(f"--gres=gpu:{res.gpus_per_node}")

        directives.extend(
            [
                f"--time={seconds_to_hhmmss(res.walltime)}",
                f"--output={job.working_directory}/{CFG.script.stdout_pattern}",
                f"--error={job.working_directory}/{CFG.script.stderr_pattern}",
            ]
        )

        if res.priority != 0:
            directives.append(f"--priority={res.priority}")

        return [f"#SBATCH {d}" for d in directives]

    @staticmethod
    def _renderEnvironment(env: Environment) -> list[str]:
        """
        Render the shell lines preparing the execution environment.
        """
        match env:
            case ModulesEnvironment(modules=modules):
                return ["module purge"] + [f"module load {m}" for m in modules]
            case CondaEnvironment(env_name=env_name):
                return [CFG.script.conda_hook, f"conda activate {env_name}"]
            case ContainerEnvironment(image=image, bind_paths=bind_paths):
                lines = [f"export SINGULARITY_IMAGE={image}"]
                if bind_paths:
                    lines.append(f'export SINGULARITY_BINDPATH="{",".join(bind_paths)}"')
                return lines
            case RawEnvironment(commands=commands):
                return [commands] if commands else []

        raise PortalError(f"Unsupported environment '{env}'.")

    @staticmethod
    def _renderMainCommand(job: Job) -> str:
        """
        Render the main command, wrapped in a container invocation if needed.
        """
        command = job.command
        if job.arguments:
            command = f"{command} {job.arguments}"

        if isinstance(job.environment, ContainerEnvironment):
            command = f"{CFG.script.container_exec} {command}"

        return command

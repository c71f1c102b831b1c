"""
This module purpose is to handle command line interface
"""

import argparse
import logging
import sys
from pathlib import Path

from .action_builder import SynthActionBuilder
from .action_executor import ActionExecutor
from .assembler import assemble
from .config import StackConfig
from .config_manager import ConfigManager
from .errors import ReelstackError
from .renderers import RENDERERS, FORMATS, get_renderer
from .utils import configure_logging, info, success, error, warning, heading, BOLD, RESET

logger = logging.getLogger("reelstack.cli")


def main(argv=None):
    """
    main: entry point, returns the process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args)
        configure_logging(config.data["log_level"])
        return args.handler(args, config)
    except ReelstackError as e:
        error(str(e))
        return 1


def build_parser():
    """
    build_parser: prepares the top level parser and every subcommand
    """
    parser = argparse.ArgumentParser(description="reelstack - ReelQuotes services stack assembler")
    parser.add_argument("--config", type=Path, help="Project config file (default: ./reelstack.yaml)")
    parser.add_argument("--log-level", dest="log_level", help="Logging level (default: INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # reelstack init
    prepare_cmd_init(subparsers)

    # reelstack synth
    prepare_cmd_synth(subparsers)

    # reelstack list
    prepare_cmd_list(subparsers)

    # reelstack outputs
    prepare_cmd_outputs(subparsers)

    return parser


def _stack_options():
    """
    _stack_options: arguments shared by every command that assembles the stack
    """
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--vpc-id", dest="vpc_id", help="Id of the already provisioned VPC")
    common.add_argument("--stack-name", dest="stack_name", help="Stack identity")
    common.add_argument("--image", help="Container image for both services")
    common.add_argument("--certificate-arn", dest="certificate_arn",
                        help="Certificate for the HTTPS listener")
    return common


def prepare_cmd_init(subparsers):
    """
    prepare_cmd_init: prepares parser for subcommand and args for `init`
    """
    init_p = subparsers.add_parser("init", parents=[_stack_options()],
                                   help="Write a reelstack.yaml with the effective settings")
    init_p.add_argument("--force", action="store_true", help="Overwrite an existing config file")
    init_p.set_defaults(handler=cmd_init)


def prepare_cmd_synth(subparsers):
    """
    prepare_cmd_synth: prepares parser for subcommand and args for `synth`
    """
    synth_p = subparsers.add_parser("synth", parents=[_stack_options()],
                                    help="Render the stack and write it to the output directory")
    synth_p.add_argument("--renderer", choices=sorted(RENDERERS), help="Template dialect")
    synth_p.add_argument("--format", choices=FORMATS, help="Serialization format")
    synth_p.add_argument("--output-dir", dest="output_dir", help="Where to write the files")
    synth_p.add_argument("--dry-run", action="store_true", help="Show the plan without writing")
    synth_p.set_defaults(handler=cmd_synth)


def prepare_cmd_list(subparsers):
    """
    prepare_cmd_list: prepares parser for subcommand and args for `list`
    """
    list_p = subparsers.add_parser("list", parents=[_stack_options()],
                                   help="List the resources of the stack")
    list_p.set_defaults(handler=cmd_list)


def prepare_cmd_outputs(subparsers):
    """
    prepare_cmd_outputs: prepares parser for subcommand and args for `outputs`
    """
    outputs_p = subparsers.add_parser("outputs", parents=[_stack_options()],
                                      help="Show the output bindings of the stack")
    outputs_p.set_defaults(handler=cmd_outputs)


def load_config(args) -> StackConfig:
    """
    load_config: merges configuration sources with the command line on top
    """
    overrides = {
        key: getattr(args, key, None)
        for key in ("vpc_id", "stack_name", "image", "certificate_arn",
                    "renderer", "format", "output_dir", "log_level")
    }
    # init writes the project file, so an explicit --config target may not exist yet
    manager = ConfigManager(project_file=args.config, must_exist=args.command != "init")
    return StackConfig(manager).load(overrides)


def _assemble(config: StackConfig):
    return assemble(
        config.data["stack_name"],
        config.network_context(),
        image=config.data["image"],
        certificate_arn=config.data.get("certificate_arn"),
    )


def cmd_init(args, config: StackConfig):
    """
    cmd_init: writes the effective configuration as the project config
    """
    existing = [p for p in config.config_manager.project_config_candidates() if p.exists()]
    if existing and not args.force:
        warning(f"{existing[0]} already exists. Use --force to overwrite.")
        return 1
    path = config.save()
    success(f"Wrote {path}")
    return 0


def cmd_synth(args, config: StackConfig):
    """
    cmd_synth: assembles the stack and writes the rendered template
    """
    graph = _assemble(config)
    renderer = get_renderer(config.data["renderer"])
    logger.debug(f"Synthesizing {graph.identity} as {renderer.name}/{config.data['format']}")
    if graph.public_service.load_balancer.certificate_arn is None:
        warning("No certificate_arn configured: the HTTPS listener has no certificate "
                "and must get one before the template can be deployed.")
    builder = SynthActionBuilder(graph, renderer, config.data["format"], config.data["output_dir"])
    actions = builder.build_synth_actions()
    ok = ActionExecutor().execute_actions(actions, dry_run=args.dry_run)
    if ok and not args.dry_run:
        info(f"Template: {builder.template_path}")
    return 0 if ok else 1


def cmd_list(args, config: StackConfig):
    """
    cmd_list: prints one line per resource of the assembled stack
    """
    graph = _assemble(config)
    heading(f"Resources of {graph.identity}")
    for kind, descriptor in graph.resources():
        name = getattr(descriptor, "cluster_name", None) or getattr(descriptor, "repository_name", None) or ""
        print(f"  {kind:<16} {BOLD}{descriptor.logical_id}{RESET} {name}".rstrip())
    return 0


def cmd_outputs(args, config: StackConfig):
    """
    cmd_outputs: prints the output bindings, resolved only after provisioning
    """
    graph = _assemble(config)
    heading(f"Outputs of {graph.identity}")
    for binding in graph.outputs:
        print(f"  {BOLD}{binding.name}{RESET} = {binding.value}")
        print(f"      {binding.description}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Command line entry point: `archgen generate|incremental|preview|sample-config`."""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from archgen.core.config import settings
from archgen.core.errors import ArchgenError
from archgen.core.logging import configure_logging
from archgen.generators.cqrs_gen.generator import generate
from archgen.generators.cqrs_gen.incremental import generate_incremental
from archgen.generators.cqrs_gen.preview import preview
from archgen.generators.cqrs_gen.sample import sample_request
from archgen.schemas.requests import GenerateRequest
from archgen.vcs.git import GitVersionControl

YAML_SUFFIXES = (".yml", ".yaml")


def write_sample_config(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    sample = sample_request()
    if path.suffix.lower() in YAML_SUFFIXES:
        text = yaml.safe_dump(sample, sort_keys=False)
    else:
        text = json.dumps(sample, indent=2) + "\n"
    path.write_text(text, encoding="utf-8")


def load_request(path: Path) -> GenerateRequest:
    """Parse a JSON or YAML file with `config` and `entities` sections."""
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(f) or {}
        else:
            data = json.load(f)
    return GenerateRequest.model_validate(data)


def _ensure_config(path: Path) -> bool:
    """False (after writing a sample) when the config file does not exist yet."""
    if path.exists():
        return True
    write_sample_config(path)
    print(f"Sample configuration created: {path}")
    print("Please edit the configuration file and run again.")
    return False


def cmd_generate(args: argparse.Namespace) -> int:
    path = Path(args.config)
    if not _ensure_config(path):
        return 0
    req = load_request(path)
    config = req.config
    if args.output:
        config = config.model_copy(update={"output_path": args.output})

    print(f"Output Path: {config.output_path}")
    print(f"Root Namespace: {config.root_namespace}")
    print(f"Entities to generate: {len(req.entities)}")
    artifacts = generate(req.entities, config)

    if args.git:
        if not GitVersionControl.is_available():
            print("WARNING: git executable not found, skipping repository setup")
        else:
            git = GitVersionControl(settings.git_author_name, settings.git_author_email)
            git.init(Path(config.output_path))
            git.commit(Path(config.output_path), f"Generate {config.root_namespace} ({len(artifacts)} files)")

    print(f"SUCCESS: Generated {len(artifacts)} files in {config.output_path}")
    return 0


def cmd_incremental(args: argparse.Namespace) -> int:
    path = Path(args.config)
    if not _ensure_config(path):
        return 0
    req = load_request(path)
    project = Path(args.project)
    config = req.config.model_copy(update={"output_path": str(project)})
    result = generate_incremental(req.entities, config, project)

    print(f"Entities added: {', '.join(result.entities_added) or '(none)'}")
    print(f"New files: {len(result.new_files)}")
    print(f"Updated files: {len(result.updated_files)}")
    print(f"Skipped files: {len(result.skipped_files)}")
    for failed, reason in result.failed_files.items():
        print(f"  FAILED {failed}: {reason}")
    return 1 if result.failed_files else 0


def cmd_preview(args: argparse.Namespace) -> int:
    req = load_request(Path(args.config))
    matches = [e for e in req.entities if e.name == args.entity]
    if not matches:
        print(f"ERROR: entity '{args.entity}' not found in {args.config}")
        return 1
    for kind, text in preview(matches[0], req.config).items():
        print("=" * 80)
        print(kind)
        print("=" * 80)
        print(text)
    return 0


def cmd_sample_config(args: argparse.Namespace) -> int:
    path = Path(args.path)
    write_sample_config(path)
    print(f"Sample configuration created: {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="archgen", description="Generate Clean Architecture CQRS projects")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate a full project")
    gen.add_argument("config", help="JSON or YAML config file (created from a sample if missing)")
    gen.add_argument("--output", help="Override config.outputPath")
    gen.add_argument("--git", action="store_true", help="Initialise a git repository and commit the output")
    gen.set_defaults(func=cmd_generate)

    inc = sub.add_parser("incremental", help="Add entities to an existing project")
    inc.add_argument("config", help="Config file whose entities are the new entities")
    inc.add_argument("--project", required=True, help="Existing project directory")
    inc.set_defaults(func=cmd_incremental)

    pre = sub.add_parser("preview", help="Print one entity's artifacts without writing")
    pre.add_argument("config", help="Config file")
    pre.add_argument("--entity", required=True, help="Entity name")
    pre.set_defaults(func=cmd_preview)

    sample = sub.add_parser("sample-config", help="Write a sample config file")
    sample.add_argument("path", help="Target path (.json, .yml or .yaml)")
    sample.set_defaults(func=cmd_sample_config)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)
    try:
        return args.func(args)
    except ArchgenError as e:
        print(f"ERROR: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

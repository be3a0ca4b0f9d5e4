"""CLI entrypoint for Rocket Anchor."""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import Optional

from .config import RAConfig, load_config, write_default_config
from .constants import CONFIG_FILENAME
from .deployer import DeployOptions, build, deploy, run_tests
from .errors import RocketAnchorError
from .seeder import PlanResult, run_seeds


def _print_progress(message: str, pct: Optional[float] = None) -> None:
    print(message)


def _report_seed_results(results: list[PlanResult]) -> bool:
    failed = [result for result in results if not result.success]
    for result in failed:
        print(f"Seeding failed for {result.program}: {result.error}")
    return not failed


def _run_seeds(args: argparse.Namespace, config: RAConfig, keep_going: bool = False) -> bool:
    results = asyncio.run(
        run_seeds(
            config,
            args.network,
            program=args.program,
            seed_file=args.seed_file,
            keep_going=keep_going,
            on_progress=_print_progress,
        )
    )
    return _report_seed_results(results)


def _cmd_deploy(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    config.network(args.network)
    options = DeployOptions(
        program=args.program,
        skip_build=args.skip_build,
        verifiable=args.verifiable,
        verify=args.verify,
        upgradeable=not args.final,
    )
    results = deploy(config, args.network, options, on_progress=_print_progress)

    print("\nDeployment Summary:")
    ok = True
    for result in results:
        if result.success and result.verified is not False:
            print(f"  ok   {result.program_name}: {result.program_id}")
        else:
            ok = False
            print(f"  FAIL {result.program_name}: {result.error}")
    if not ok:
        print("Some deployments failed")
    else:
        print("All deployments completed successfully")

    if args.seed:
        print("\nRunning seed plans...")
        if not _run_seeds(args, config):
            return 1
        print("Seeding completed successfully")
    return 0 if ok else 1


def _cmd_seed(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    config.network(args.network)
    if not _run_seeds(args, config, keep_going=args.keep_going):
        return 1
    print("Seeding completed successfully")
    return 0


def _cmd_init(args: argparse.Namespace) -> int:
    path = write_default_config(Path.cwd() / CONFIG_FILENAME, force=args.force)
    print(f"Created {path.name}")
    return 0


def _cmd_build(args: argparse.Namespace) -> int:
    print("Building Anchor programs...")
    build(args.verifiable)
    print("Build completed")
    return 0


def _cmd_test(args: argparse.Namespace) -> int:
    print("Running tests...")
    rc = run_tests()
    if rc != 0:
        print(f"Tests failed with code {rc}")
        return rc
    print("Tests passed")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog=os.path.basename(sys.argv[0]),
        description="Deploy and seed Anchor programs",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_deploy = sub.add_parser("deploy", help="Deploy Anchor programs to a network")
    p_deploy.add_argument("-n", "--network", required=True, help="Network name from ra.toml")
    p_deploy.add_argument("-p", "--program", help="Deploy only this program")
    p_deploy.add_argument("--config", help="Path to ra.toml")
    p_deploy.add_argument("--skip-build", action="store_true", help="Skip anchor build")
    p_deploy.add_argument("--verifiable", action="store_true", help="Build with --verifiable")
    p_deploy.add_argument("--verify", action="store_true", help="Check programs are executable on chain")
    p_deploy.add_argument("--final", action="store_true", help="Deploy as non-upgradeable")
    p_deploy.add_argument("--seed", action="store_true", help="Run seed plans after deploying")
    p_deploy.add_argument("--seed-file", help="Seed document (TOML or JSON)")
    p_deploy.set_defaults(func=_cmd_deploy)

    p_seed = sub.add_parser("seed", help="Run seed plans against deployed programs")
    p_seed.add_argument("-n", "--network", required=True, help="Network name from ra.toml")
    p_seed.add_argument("-p", "--program", help="Seed only this program")
    p_seed.add_argument("-s", "--seed-file", help="Seed document (TOML or JSON)")
    p_seed.add_argument("--config", help="Path to ra.toml")
    p_seed.add_argument(
        "--keep-going",
        action="store_true",
        help="Continue with the next program when one fails",
    )
    p_seed.set_defaults(func=_cmd_seed)

    p_init = sub.add_parser("init", help="Create ra.toml in the current directory")
    p_init.add_argument("--force", action="store_true", help="Overwrite an existing ra.toml")
    p_init.set_defaults(func=_cmd_init)

    p_build = sub.add_parser("build", help="Build Anchor programs")
    p_build.add_argument("--verifiable", action="store_true", help="Build with --verifiable")
    p_build.set_defaults(func=_cmd_build)

    p_test = sub.add_parser("test", help="Run anchor test")
    p_test.set_defaults(func=_cmd_test)

    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except FileNotFoundError as exc:
        print(str(exc))
        return 1
    except (RocketAnchorError, ValueError) as exc:
        print(str(exc))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

"""
Command-line interface for task-monitor.

Commands:
  run         - watch the tasks root and keep the dashboard up to date
  regenerate  - publish the snapshot once and exit
  status      - print every task list with its counts
  config      - show or change the monitor configuration
"""

import sys
import logging
import argparse
from pathlib import Path

from task_monitor import __version__
from task_monitor.config import ConfigManager, ConfigValidationError
from task_monitor.constants import (
    DEFAULT_CONFIG_FILE,
    TASK_MONITOR_TASKS_DIR,
    TASK_MONITOR_OUTPUT,
    TASK_MONITOR_LOG_LEVEL,
)
from task_monitor.daemon import TaskMonitorDaemon
from task_monitor.models import TaskStatus
from task_monitor.publisher import Publisher, PublishError
from task_monitor.scanner import TaskScanner


def _setup_logging(level: str = TASK_MONITOR_LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )


def cmd_run(args):
    """Run the monitor until interrupted."""
    _setup_logging()

    print("=" * 60)
    print(f"📋 Claude Task Monitor v{__version__}")
    print("=" * 60)

    daemon = TaskMonitorDaemon(
        config_file=args.config,
        tasks_dir=args.tasks_dir,
        output_dir=args.output_dir
    )
    daemon.run()

    print("\nGoodbye!")
    return 0


def cmd_regenerate(args):
    """Publish the snapshot once."""
    _setup_logging()

    config = ConfigManager(args.config).config
    scanner = TaskScanner(args.tasks_dir)
    publisher = Publisher(args.output_dir)

    snapshot = scanner.build_snapshot(config.project_dir)
    try:
        data_file, html_file = publisher.publish(snapshot, config)
    except PublishError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    print(f"✅ Published {len(snapshot.task_lists)} task lists")
    print(f"   Data:      {data_file}")
    print(f"   Dashboard: {html_file}")
    return 0


def cmd_status(args):
    """Show every task list with its counts."""
    scanner = TaskScanner(args.tasks_dir)
    task_lists = scanner.scan_task_lists()

    print("=" * 60)
    print("📊 Task Lists")
    print("=" * 60)
    print(f"\nTasks directory: {scanner.tasks_dir}")

    if not task_lists:
        print("\n📭 No task lists found")
        return 0

    for task_list in task_lists:
        print(f"\n  📁 {task_list.id}")
        print(f"      Last modified: {task_list.last_modified.isoformat()}")
        print(f"      Tasks: {len(task_list.tasks)}, "
              f"Pending: {task_list.count_by_status(TaskStatus.PENDING)}, "
              f"In progress: {task_list.count_by_status(TaskStatus.IN_PROGRESS)}, "
              f"Completed: {task_list.count_by_status(TaskStatus.COMPLETED)}")

        available = task_list.available_tasks()
        if available:
            ids = ", ".join(f"#{task.id}" for task in available)
            print(f"      Available: {ids}")
        else:
            print("      Available: (none)")

    return 0


def cmd_config_show(args):
    """Print the current configuration."""
    config_manager = ConfigManager(args.config)
    config = config_manager.config

    print(f"\nConfiguration: {config_manager.config_file}")
    print(f"Project directory: {config.project_dir}")
    print(f"Poll interval:     {config.poll_interval} ms")
    print(f"Agent names:       {', '.join(config.agent_names)}")
    return 0


def cmd_config_set(args):
    """Validate and persist configuration changes."""
    changes = {}
    if args.project_dir is not None:
        changes["projectDir"] = args.project_dir
    if args.poll_interval is not None:
        changes["pollInterval"] = args.poll_interval
    if args.agent_names is not None:
        changes["agentNames"] = [name for name in args.agent_names.split(",") if name.strip()]

    if not changes:
        print("⚠️  Nothing to change. Use --project-dir, --poll-interval or --agent-names")
        return 1

    config_manager = ConfigManager(args.config)
    try:
        config_manager.update(changes)
    except ConfigValidationError as e:
        print(f"❌ {e.message}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"❌ Failed to save configuration: {e}", file=sys.stderr)
        return 1

    print(f"✅ Configuration saved to {config_manager.config_file}")
    print("   A running monitor picks up the change automatically")
    return 0


def main():
    """CLI entry point - called by setuptools entry point."""
    parser = argparse.ArgumentParser(
        description="Task Monitor - real-time dashboard for task lists",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start the monitor
  task-monitor run

  # Publish once
  task-monitor regenerate

  # Show task lists
  task-monitor status

  # Change the poll interval of a running monitor
  task-monitor config set --poll-interval 5000

Environment Variables:
  TASK_MONITOR_DATA_DIR     Data directory (default: ~/.claude/claude-task-monitor/)
  TASK_MONITOR_OUTPUT       Output directory for HTML/JSON (default: data dir)
  TASK_MONITOR_TASKS_DIR    Tasks directory (default: ~/.claude/tasks/)
  TASK_MONITOR_DEBOUNCE_MS  Regeneration debounce window (default: 300)
  TASK_MONITOR_USE_POLLING  Poll the filesystem instead of native events
        """
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file"
    )
    parser.add_argument(
        "--tasks-dir",
        type=Path,
        default=None,
        help="Tasks directory to watch"
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for the generated JSON and HTML"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Start the monitor")
    run_parser.set_defaults(func=cmd_run)

    regenerate_parser = subparsers.add_parser("regenerate", help="Publish the snapshot once")
    regenerate_parser.set_defaults(func=cmd_regenerate)

    status_parser = subparsers.add_parser("status", help="Show task lists")
    status_parser.set_defaults(func=cmd_status)

    config_parser = subparsers.add_parser("config", help="Show or change configuration")
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    show_parser = config_subparsers.add_parser("show", help="Show configuration")
    show_parser.set_defaults(func=cmd_config_show)

    set_parser = config_subparsers.add_parser("set", help="Change configuration")
    set_parser.add_argument("--project-dir", help="Working directory for launched agents")
    set_parser.add_argument("--poll-interval", type=int, help="Dashboard poll interval in ms (500-60000)")
    set_parser.add_argument("--agent-names", help="Comma-separated agent names")
    set_parser.set_defaults(func=cmd_config_set)

    args = parser.parse_args()

    if not args.config:
        args.config = DEFAULT_CONFIG_FILE
    if not args.tasks_dir:
        args.tasks_dir = TASK_MONITOR_TASKS_DIR
    if not args.output_dir:
        args.output_dir = TASK_MONITOR_OUTPUT

    if hasattr(args, "func"):
        return args.func(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())

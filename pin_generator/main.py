"""Main entry point for the application."""
import asyncio
import sys
import argparse
from typing import Dict, List, Optional
from pin_generator.config import Config, STORE_BACKENDS
from pin_generator.allocation.orchestrator import AllocationOrchestrator
from pin_generator.errors import PinGeneratorError
from pin_generator.store.base import PinStore
from pin_generator.store.memory import InMemoryPinStore
from pin_generator.store.supabase import SupabasePinStore
from pin_generator.utils.pin_rules import classify, classify_reasons


def create_store(config: Config) -> PinStore:
    """Build the store selected in the configuration."""
    if config.get_store_backend() == "memory":
        return InMemoryPinStore()
    return SupabasePinStore(config)


def render_table(pins: List[str], title: str = "PIN") -> str:
    """Render served PINs as a one-column table."""
    width = max([len(title)] + [len(pin) for pin in pins])
    border = "+" + "-" * (width + 2) + "+"
    lines = [border, f"| {title.ljust(width)} |", border]
    lines.extend(f"| {pin.ljust(width)} |" for pin in pins)
    lines.append(border)
    return "\n".join(lines)


class Application:
    """Main application class."""
    
    def __init__(self, config: Optional[Config] = None, store: Optional[PinStore] = None):
        self.config = config or Config()
        self.store = store
        self.orchestrator: Optional[AllocationOrchestrator] = None
    
    async def start(self):
        """Connect to the store and make sure it is set up."""
        if self.store is None:
            self.store = create_store(self.config)
        await self.store.start()
        
        allocation_config = self.config.get_allocation_config()
        self.orchestrator = AllocationOrchestrator(
            self.store,
            max_rollovers=allocation_config["max_rollovers"],
        )
        await self.orchestrator.setup()
    
    async def stop(self):
        """Stop the application."""
        if self.store:
            await self.store.stop()
    
    async def generate(self, requested: int) -> List[str]:
        """Retrieve `requested` new PINs, bounded by the configured timeout."""
        timeout = self.config.get_allocation_config()["request_timeout"]
        return await asyncio.wait_for(self.orchestrator.request_pins(requested), timeout)
    
    async def stats(self) -> Dict[str, int]:
        return await self.orchestrator.summarize()


def notify(message: str):
    """Show a short notification, used for error reporting."""
    print(f"❌ {message}", file=sys.stderr)


def check_code(code: str) -> int:
    try:
        verdict = classify(code)
        reasons = classify_reasons(code)
    except ValueError as e:
        notify(str(e))
        return 1
    
    print(f"{code}: {verdict}")
    for reason in reasons:
        print(f"  - {reason.replace('_', ' ')}")
    return 0


async def run(args: argparse.Namespace, config: Optional[Config] = None) -> int:
    """Run one command. Returns the process exit status."""
    if args.command == "check":
        return check_code(args.code)
    
    config = config or Config()
    try:
        config.load()
        if args.store:
            config.set_store(args.store)
    except ValueError as e:
        notify(f"Configuration error: {e}")
        return 1
    
    if args.dry_run:
        return dry_run(config)
    
    app = Application(config)
    try:
        await app.start()
        if args.command == "stats":
            for state, count in (await app.stats()).items():
                print(f"{state:>12}: {count}")
        else:
            pins = await app.generate(args.count)
            print(render_table(pins))
        return 0
    except asyncio.TimeoutError:
        notify("Timed out waiting for the PIN store")
        return 1
    except PinGeneratorError as e:
        notify(str(e))
        return 1
    finally:
        await app.stop()


def dry_run(config: Config) -> int:
    """Print a configuration summary without contacting the store."""
    print("🔍 DRY RUN MODE - Configuration check only")
    print("=" * 60)
    
    supabase_config = config.get_supabase_config()
    allocation_config = config.get_allocation_config()
    
    print(f"Store: {config.get_store_backend()}")
    print(f"\nSupabase Configuration:")
    print(f"  URL: {supabase_config['url'] or 'NOT SET'}")
    print(f"  Key: {'SET' if supabase_config['key'] else 'NOT SET'}")
    print(f"  Table: {supabase_config['table']}")
    print(f"  RPCs: {supabase_config['random_rpc']}, {supabase_config['reset_rpc']}")
    
    print(f"\nAllocation:")
    print(f"  Max rollovers: {allocation_config['max_rollovers']}")
    print(f"  Request timeout: {allocation_config['request_timeout']}s")
    
    if config.get_store_backend() == "supabase" and not (supabase_config["url"] and supabase_config["key"]):
        print("\n❌ SUPABASE_URL and SUPABASE_KEY are required for the supabase store")
        return 1
    
    print(f"\n✅ All configuration checks passed!")
    print("=" * 60)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="PIN Generator")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Test configuration without contacting the store",
    )
    parser.add_argument(
        "--store",
        choices=STORE_BACKENDS,
        help="Override the configured store backend",
    )
    subparsers = parser.add_subparsers(dest="command")
    
    generate = subparsers.add_parser("generate", help="Allocate random PINs")
    generate.add_argument("count", type=int, nargs="?", default=1, help="Number of PINs")
    
    check = subparsers.add_parser("check", help="Check whether a PIN is allowed")
    check.add_argument("code", help="4-digit PIN")
    
    subparsers.add_parser("stats", help="Count PINs per state")
    return parser


def cli(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command is None:
        args.command = "generate"
        args.count = 1
    
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        print("\nShutting down...")
        return 0


if __name__ == "__main__":
    sys.exit(cli())

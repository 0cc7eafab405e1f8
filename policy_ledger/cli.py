"""
Command-line interface for the policy ledger.

Every command runs as one transaction against a JSON-file store. The
command line plays the host: it supplies the transaction timestamp
(``--at``, defaulting to the current UTC time).
"""

import sys
from typing import Any, Callable

import click
import structlog

from policy_ledger.config import load_config, validate_config
from policy_ledger.core.exceptions import LedgerError
from policy_ledger.core.serializers import serialize_to_json
from policy_ledger.utils.logging import configure_logging
from policy_ledger.utils.time_conversion import parse_timestamp, utc_now


logger = structlog.get_logger()


@click.group()
@click.option(
    "--config", "-c",
    type=click.Path(exists=True),
    help="Path to configuration file",
)
@click.option(
    "--store", "-s",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to the ledger JSON file (default: from config)",
)
@click.option(
    "--at",
    "at",
    default=None,
    help="Transaction timestamp, ISO-8601 (default: now, UTC)",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output",
)
@click.option(
    "--json-logs",
    is_flag=True,
    help="Output logs as JSON",
)
@click.pass_context
def main(ctx, config, store, at, verbose, json_logs):
    """Insurance policy ledger."""
    ctx.ensure_object(dict)

    log_level = "DEBUG" if verbose else "WARNING"
    configure_logging(level=log_level, json_output=json_logs)

    if at is None:
        timestamp = utc_now()
    else:
        try:
            timestamp = parse_timestamp(at)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--at") from e

    ctx.obj["config_path"] = config
    ctx.obj["store_path"] = store
    ctx.obj["timestamp"] = timestamp


def _run(ctx: click.Context, operation: Callable[[Any, Any], Any]) -> Any:
    """
    Run ``operation(engine, txn)`` inside one committed transaction.

    Ledger errors are reported on stderr and exit with status 1.
    """
    from policy_ledger.core.lifecycle import PolicyLifecycleEngine
    from policy_ledger.store.json_file import JsonFileStore

    try:
        config = load_config(ctx.obj.get("config_path"), store_path=ctx.obj.get("store_path"))
        store = JsonFileStore(config.storage.path)
        engine = PolicyLifecycleEngine(config)

        with store.transaction(ctx.obj["timestamp"]) as txn:
            return operation(engine, txn)

    except LedgerError as e:
        click.echo(f"Error ({type(e).__name__}): {e}", err=True)
        sys.exit(1)
    except Exception as e:
        logger.exception("command_failed", error=str(e))
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.pass_context
def init(ctx):
    """Initialize the ledger (resets the policy counter to 0)."""
    _run(ctx, lambda engine, txn: engine.init_ledger(txn))
    click.echo("Ledger initialized successfully")


@main.command()
@click.option("--type", "policy_type", type=click.Choice(["health", "life"]), default="health", show_default=True)
@click.option("--holder", required=True, help="Policy holder name")
@click.option("--age", type=int, required=True)
@click.option("--location", default="")
@click.option("--company", default="", help="Insurance company name")
@click.option("--package", "package_name", default="", help="Named coverage package (overrides premium/installments)")
@click.option("--premium", default="0", help="Premium per installment")
@click.option("--installments", type=int, default=0, help="Number of installments")
@click.option("--profit-rate", default="0", help="Profit percentage (<= 0 uses the ledger default)")
@click.pass_context
def create(ctx, policy_type, holder, age, location, company, package_name, premium, installments, profit_rate):
    """Create a Health or Life policy.

    Examples:

    \b
    # Custom plan: 100 per installment, 12 installments, default rate
    policy-ledger create --holder "Jane Doe" --age 40 --premium 100 --installments 12

    \b
    # Named package
    policy-ledger create --type life --holder "Jane Doe" --age 40 --package Gold
    """

    def operation(engine, txn):
        factory = engine.create_life_policy if policy_type == "life" else engine.create_health_policy
        return factory(
            txn,
            holder,
            age,
            location,
            company,
            package_name=package_name,
            premium=premium,
            installment_no=installments,
            profit_percentage=profit_rate,
        )

    policy_id = _run(ctx, operation)
    click.echo(f"Created policy {policy_id}")


@main.command()
@click.argument("policy_id", type=int)
@click.pass_context
def show(ctx, policy_id):
    """Show one policy as JSON."""
    policy = _run(ctx, lambda engine, txn: engine.read_policy(txn, policy_id))
    click.echo(serialize_to_json(policy))


@main.command("list")
@click.pass_context
def list_policies(ctx):
    """List every stored policy as a JSON array."""
    policies = _run(ctx, lambda engine, txn: engine.get_all_policies(txn))
    click.echo(serialize_to_json(policies))


@main.command()
@click.pass_context
def count(ctx):
    """Show the number of policy ids allocated so far."""
    total = _run(ctx, lambda engine, txn: engine.get_total_policies_count(txn))
    click.echo(str(total))


@main.command()
@click.argument("policy_id", type=int)
@click.argument("amount")
@click.pass_context
def pay(ctx, policy_id, amount):
    """Pay one premium installment."""
    policy = _run(ctx, lambda engine, txn: engine.pay_premium(txn, policy_id, amount))
    click.echo(
        f"Payment accepted for policy {policy_id}: "
        f"{policy.payment_count}/{policy.installment_no} installments, total paid {policy.total_paid}"
    )


@main.command()
@click.argument("policy_id", type=int)
@click.pass_context
def claim(ctx, policy_id):
    """Claim the coverage of a fully paid policy."""
    policy = _run(ctx, lambda engine, txn: engine.claim_coverage(txn, policy_id))
    click.echo(f"Coverage claimed for policy {policy_id}: user balance {policy.user_balance}")


@main.command()
@click.argument("policy_id", type=int)
@click.pass_context
def cancel(ctx, policy_id):
    """Cancel a partly paid policy and refund what was paid."""
    policy = _run(ctx, lambda engine, txn: engine.cancel_policy(txn, policy_id))
    click.echo(f"Policy {policy_id} cancelled: user balance {policy.user_balance}")


@main.command()
@click.pass_context
def expire(ctx):
    """Mark every Active policy past its term as Expired."""
    expired = _run(ctx, lambda engine, txn: engine.expire_policies(txn))
    click.echo(f"Expired {len(expired)} policies" + (f": {', '.join(map(str, expired))}" if expired else ""))


@main.command()
@click.argument("policy_id", type=int)
@click.option("--holder", required=True)
@click.option("--type", "policy_type", type=click.Choice(["Health", "Life"]), required=True)
@click.option("--premium", required=True)
@click.option("--coverage", required=True)
@click.option("--installments", type=int, required=True)
@click.option("--total-premium", required=True, help="Total premium to pay")
@click.pass_context
def update(ctx, policy_id, holder, policy_type, premium, coverage, installments, total_premium):
    """Overwrite policy fields (no status checks, nothing recomputed)."""
    _run(
        ctx,
        lambda engine, txn: engine.update_policy(
            txn, policy_id, holder, policy_type, premium, coverage, installments, total_premium
        ),
    )
    click.echo(f"Policy {policy_id} updated")


@main.command()
@click.argument("policy_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete(ctx, policy_id, yes):
    """Delete a policy record, bypassing the lifecycle."""
    if not yes and not click.confirm(f"Delete policy {policy_id}?"):
        click.echo("Aborted.")
        return
    _run(ctx, lambda engine, txn: engine.delete_policy(txn, policy_id))
    click.echo(f"Policy {policy_id} deleted")


@main.command("total-paid")
@click.argument("policy_id", type=int)
@click.pass_context
def total_paid(ctx, policy_id):
    """Show the premium paid so far."""
    click.echo(str(_run(ctx, lambda engine, txn: engine.get_total_paid(txn, policy_id))))


@main.command()
@click.argument("policy_id", type=int)
@click.pass_context
def installments(ctx, policy_id):
    """Show the target installment count."""
    click.echo(str(_run(ctx, lambda engine, txn: engine.get_installment_no(txn, policy_id))))


@main.command("set-installments")
@click.argument("policy_id", type=int)
@click.argument("new_installment_no", type=int)
@click.pass_context
def set_installments(ctx, policy_id, new_installment_no):
    """Change the target installment count."""
    _run(ctx, lambda engine, txn: engine.set_installment_no(txn, policy_id, new_installment_no))
    click.echo(f"Installment number for policy ID {policy_id} set to {new_installment_no}")


@main.command("profit-rate")
@click.pass_context
def profit_rate(ctx):
    """Show the default profit percentage."""
    click.echo(str(_run(ctx, lambda engine, txn: engine.get_default_profit_rate(txn))))


@main.command("set-profit-rate")
@click.argument("new_rate")
@click.pass_context
def set_profit_rate(ctx, new_rate):
    """Change the default profit percentage for future policies."""
    _run(ctx, lambda engine, txn: engine.update_default_profit_rate(txn, new_rate))
    click.echo(f"Default profit percentage set to {new_rate}")


@main.command()
@click.option("--premium", required=True)
@click.option("--installments", type=int, required=True)
@click.option("--profit-rate", default="0", help="Profit percentage (<= 0 uses the ledger default)")
@click.pass_context
def maturity(ctx, premium, installments, profit_rate):
    """Calculate a maturity value without creating a policy."""
    value = _run(
        ctx,
        lambda engine, txn: engine.calculate_maturity(txn, premium, installments, profit_rate),
    )
    click.echo(str(value))


@main.command("validate-config")
@click.pass_context
def validate_config_cmd(ctx):
    """Validate the configuration file."""
    from policy_ledger.config.validation import ConfigurationError

    config_path = ctx.obj.get("config_path")

    try:
        config = load_config(config_path)
        warnings = validate_config(config)

        click.echo("Configuration is valid.")

        if warnings:
            click.echo("\nWarnings:")
            for warning in warnings:
                click.echo(f"  - {warning}")

    except ConfigurationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()

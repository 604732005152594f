"""
Account command handlers.

Handles: login, signup, logout
"""

import argparse
from typing import Optional

from tribute_tracker.context import AppContext
from tribute_tracker.core.console import get_console
from tribute_tracker.core.output import log


def _credentials(ctx: AppContext, args: argparse.Namespace) -> tuple[str, str]:
    email = args.email or ctx.config.auth.email
    if not email:
        email = get_console().input("Email: ").strip()
    password = ctx.config.auth.password
    if not password:
        password = get_console().input("Password: ", password=True)
    return email, password


def _require_remote(ctx: AppContext) -> bool:
    if ctx.remote.configured:
        return True
    log(
        "Supabase is not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY "
        "or add a [remote] section to config.toml",
        level="error",
    )
    return False


async def handle_login_command(ctx: AppContext, args: argparse.Namespace) -> int:
    if not _require_remote(ctx):
        return 1
    email, password = _credentials(ctx, args)
    try:
        user_id = await ctx.auth.sign_in(email, password)
    except Exception as e:
        log(f"Login failed: {e}", level="error")
        return 1
    if user_id is None:
        log("Login failed: no user returned", level="error")
        return 1
    log(f"🔑 Signed in as {email}", level="success")
    return 0


async def handle_signup_command(ctx: AppContext, args: argparse.Namespace) -> int:
    if not _require_remote(ctx):
        return 1
    email, password = _credentials(ctx, args)
    full_name: Optional[str] = getattr(args, "name", None)
    try:
        user_id = await ctx.auth.sign_up(email, password, full_name=full_name)
    except Exception as e:
        log(f"Sign-up failed: {e}", level="error")
        return 1
    if user_id is None:
        log("Account created. Confirm your email, then run: login", level="warning")
        return 0
    log(f"🎸 Welcome aboard, {full_name or email}", level="success")
    return 0


async def handle_logout_command(ctx: AppContext, args: argparse.Namespace) -> int:
    if not _require_remote(ctx):
        return 1
    if not ctx.auth.signed_in:
        log("Not signed in")
        return 0
    try:
        await ctx.auth.sign_out()
    except Exception as e:
        log(f"Sign-out failed: {e}", level="error")
        return 1
    log("👋 Signed out")
    return 0

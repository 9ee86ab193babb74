#!/usr/bin/env python3
"""
Debug script to check if environment variables are loaded correctly.
Run this inside the backend container before taking payments.

Note: Docker Compose doesn't copy .env into the container - it reads it and
injects variables as environment variables. So we check the actual env vars.
"""
import os
import sys

# Add parent directory to path to import app modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.config import settings


def _masked(value):
    return "***" + value[-4:] if value else "(not set)"


print("=" * 60)
print("Environment Variables Check")
print("=" * 60)
print()

print("Stripe Configuration:")
print(f"  STRIPE_SECRET_KEY: {_masked(settings.STRIPE_SECRET_KEY)}")
print(f"  STRIPE_WEBHOOK_SECRET: {_masked(settings.STRIPE_WEBHOOK_SECRET)}")
print(f"  STRIPE_API_VERSION: {settings.STRIPE_API_VERSION or '(account default)'}")
print()

print("Supabase Configuration:")
print(f"  SUPABASE_URL: {settings.SUPABASE_URL or '(not set)'}")
print(f"  SUPABASE_ANON_KEY: {_masked(settings.SUPABASE_ANON_KEY)}")
print()

print("Payments:")
print(f"  COMMISSION_RATE: {settings.COMMISSION_RATE}%")
print(f"  MINIMUM_TIP_AMOUNT: {settings.MINIMUM_TIP_AMOUNT} cents")
print(f"  DEFAULT_CURRENCY: {settings.DEFAULT_CURRENCY}")
print()

problems = []
if not settings.STRIPE_SECRET_KEY:
    problems.append("STRIPE_SECRET_KEY is empty: every payment call will fail")
elif not settings.STRIPE_SECRET_KEY.startswith(("sk_", "rk_")):
    problems.append("STRIPE_SECRET_KEY does not look like a Stripe secret key (sk_... or rk_...)")
if not settings.STRIPE_WEBHOOK_SECRET:
    problems.append("STRIPE_WEBHOOK_SECRET is empty: webhooks will be rejected and transactions stay Pending")
if not settings.SUPABASE_URL or not settings.SUPABASE_ANON_KEY:
    problems.append("SUPABASE_URL / SUPABASE_ANON_KEY missing: no request can authenticate")
if not 0 <= settings.COMMISSION_RATE <= 100:
    problems.append("COMMISSION_RATE must be between 0 and 100")

if problems:
    for problem in problems:
        print(f"⚠️  WARNING: {problem}")
    print("   The backend container needs to be restarted after updating .env")
else:
    print("✅ Payment and auth settings look complete")

print("=" * 60)

#!/usr/bin/env python3
"""
Script to verify that the savings ledger tables exist and hold sane data
"""
import asyncio
import sys
import platform
from sqlalchemy import inspect, text
from app.core.database import engine, Base
from app import models  # noqa: F401

async def verify_database():
    """Check tables, migration status and ledger sanity"""

    try:
        async with engine.begin() as conn:
            print("🔗 Connected to database successfully!")

            existing = await conn.run_sync(
                lambda sync_conn: set(inspect(sync_conn).get_table_names())
            )

            print("\n📋 Ledger tables:")
            missing = []
            for table in Base.metadata.sorted_tables:
                if table.name in existing:
                    print(f"   ✅ {table.name}")
                else:
                    print(f"   ❌ {table.name} (missing)")
                    missing.append(table.name)

            # Check alembic version
            print("\n🔄 Migration status:")
            if "alembic_version" in existing:
                result = await conn.execute(text("SELECT version_num FROM alembic_version;"))
                version = result.fetchone()
                if version:
                    print(f"   ✅ Current Alembic version: {version[0]}")
                else:
                    print("   ⚠️  No Alembic version found")
            else:
                print("   ⚠️  alembic_version table not found (tables created at startup?)")

            if missing:
                print(f"\n❌ Missing tables: {', '.join(missing)}")
                sys.exit(1)

            print("\n📊 Table statistics:")
            for table in Base.metadata.sorted_tables:
                result = await conn.execute(text(f"SELECT COUNT(*) FROM {table.name};"))
                print(f"   📈 {table.name}: {result.scalar_one()} rows")

            print("\n🧮 Ledger sanity:")
            result = await conn.execute(text(
                "SELECT COUNT(*) FROM savings_goals WHERE current_amount < 0;"
            ))
            negative = result.scalar_one()
            if negative:
                print(f"   ❌ {negative} savings goals have a negative balance")
                sys.exit(1)
            print("   ✅ No savings goal has a negative balance")

        print("\n✅ Database verification completed successfully!")

    finally:
        # Properly dispose of the engine
        await engine.dispose()

def main():
    """Main function with proper asyncio handling"""
    if platform.system() == 'Windows':
        asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())

    try:
        asyncio.run(verify_database())
    except Exception as e:
        print(f"❌ Database verification failed: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()

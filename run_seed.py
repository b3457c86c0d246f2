#!/usr/bin/env python3
"""
Standalone script to seed master data.
Adds the built-in learning curves and the starter sewing lines to the
configured database, skipping anything already there.

Usage:
    python run_seed.py
"""

import sys

from planview import create_app
from planview.seed import seed_master_data


def main():
    """Main function to run the master data seed."""
    print("Starting master data seed")
    print("=" * 50)

    # Create Flask app context
    app = create_app()

    with app.app_context():
        try:
            result = seed_master_data()

            print("\n" + "=" * 50)
            print("Master data seed completed successfully!")
            print(f"Learning curves added: {result['learning_curves_added']}")
            print(f"Production lines added: {result['production_lines_added']}")

            return 0

        except Exception as e:
            print(f"\nMaster data seed failed: {e}")
            return 1


if __name__ == "__main__":
    exit_code = main()
    sys.exit(exit_code)

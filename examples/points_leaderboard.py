#!/usr/bin/env python3
"""
Points Leaderboard - Counters, arrays and snapshots.

This example demonstrates:
1. math/inc/dec on numbers and numbers inside objects
2. push/remove/includes on arrays
3. Autonum keys for an append-only log
4. Exporting a store and importing it into another one

Run: python examples/points_leaderboard.py
"""

from datetime import datetime, timezone

from mirrormap import Store


def award(points: Store, log: Store, user: str, amount: int, reason: str):
    """Add points to a user and record it in the log."""
    points.get(user)  # materialize the default profile
    points.math(user, "+", amount, "score")
    if amount >= 10 and not points.includes(user, "big-win", "badges"):
        points.push(user, "big-win", "badges")
    log.set(log.next_autonum(), {
        "user": user,
        "amount": amount,
        "reason": reason,
        "at": datetime.now(timezone.utc),
    })


def main():
    points = Store("::memory::", default={"score": 0, "badges": []})
    log = Store()

    award(points, log, "alice", 5, "first answer")
    award(points, log, "bob", 12, "bug report")
    award(points, log, "alice", 10, "code review")
    points.dec("bob", "score")
    points.remove("bob", "big-win", "badges")

    print("\n" + "=" * 50)
    print("  LEADERBOARD")
    print("=" * 50)
    ranked = sorted(points.items(), key=lambda item: item[1]["score"], reverse=True)
    for user, profile in ranked:
        print(f"  {user:<10} {profile['score']:>5}  {', '.join(profile['badges'])}")

    print("\n  Log:")
    for key, entry in log.items():
        print(f"    #{key} {entry['user']} +{entry['amount']} ({entry['reason']})")

    # Copy everything into a fresh store
    backup = Store()
    backup.import_(points.export())
    print(f"\n  Backup holds {backup.size} users: {', '.join(backup.keys())}")
    points.close()


if __name__ == "__main__":
    main()

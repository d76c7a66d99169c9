"""Print recent orders, sales and low stock straight from a SQLite database.

Usage: python tools/db_check.py [dev.db] [user_id]
"""
import sqlite3
import sys

DB = sys.argv[1] if len(sys.argv) > 1 else "dev.db"
USER = sys.argv[2] if len(sys.argv) > 2 else None

conn = sqlite3.connect(DB)
cur = conn.cursor()

print("=== Recent Orders ===")
if USER:
    cur.execute(
        "SELECT id, user_id, gateway_order_id, status, total, created_at FROM orders WHERE user_id=? ORDER BY created_at DESC LIMIT 20",
        (USER,),
    )
else:
    cur.execute(
        "SELECT id, user_id, gateway_order_id, status, total, created_at FROM orders ORDER BY created_at DESC LIMIT 20"
    )
for r in cur.fetchall():
    print(r)

print("\n=== Recent Sales ===")
cur.execute(
    "SELECT id, product_id, user_id, quantity, unit_price, line_total FROM sales ORDER BY id DESC LIMIT 20"
)
for r in cur.fetchall():
    print(r)

print("\n=== Low Stock ===")
cur.execute("SELECT id, name, stock FROM products WHERE stock <= 3 ORDER BY stock")
for r in cur.fetchall():
    print(r)

if USER:
    print(f"\n=== Cart of user {USER} ===")
    cur.execute("SELECT product_id, quantity FROM cart_items WHERE user_id=?", (USER,))
    for r in cur.fetchall():
        print(r)

conn.close()

"""
Console menus for the store database.

Wires the workflow functions in :mod:`storedb.services` into numbered
console menus. Every request opens its own database session; the login
session lives for the whole loop and is passed to each workflow.
"""

import logging

from storedb.config import settings
from storedb.database import get_db
from storedb.services import auth, history, products, reports, transactions
from storedb.services.security import LoginSession
from storedb.utils.audit import read_log_contents
from storedb.utils.errors import describe_error
from storedb.utils.workers import WorkerPool

logger = logging.getLogger(__name__)

LINE = "-" * 54
WIDE_LINE = "-" * 89


def _ask(prompt: str) -> str:
    return input(prompt).strip()


def _ask_int(prompt: str) -> int:
    return int(_ask(prompt))


def _ask_optional_float(prompt: str):
    raw = _ask(prompt)
    return float(raw) if raw else None


def _print_products(items) -> None:
    print(f"{'ID':<10} {'Name':<30} {'Price':<10} {'Quantity':<10}")
    print(LINE)
    for p in items:
        print(f"{p.id:<10} {p.name:<30} ${p.price:<9.2f} {p.quantity:<10}")


def _print_purchases(page, with_customer: bool) -> None:
    who = "Customer" if with_customer else "Product ID"
    print(f"{'ID':<5} {'Date':<20} {who:<15} {'Product':<25} {'Quantity':<10} {'Price':<10} {'Total':<10}")
    print(WIDE_LINE)
    for line in page.items:
        date = line.date.strftime("%Y-%m-%d %H:%M:%S") if line.date else "-"
        first = line.customer_name if with_customer else line.product_id
        print(f"{line.transaction_id:<5} {date:<20} {first:<15} {line.product_name:<25} "
              f"{line.quantity:<10} ${line.unit_price:<9.2f} ${line.total:<9.2f}")


class ConsoleApp:
    """Interactive menus over the store workflows."""

    def __init__(self, db_factory, page_size: int = 10, pool: WorkerPool = None):
        self.db_factory = db_factory
        self.page_size = page_size
        self.pool = pool
        self.session = LoginSession()

    def _call(self, context: str, fn, *args, **kwargs):
        """Run one workflow in its own DB session; report failures instead of raising."""
        try:
            with self.db_factory() as db:
                return fn(db, self.session, *args, **kwargs)
        except Exception as e:
            print(describe_error(e, context))
            return None

    def _admin_label(self) -> str:
        return "" if self.session.is_admin else " (Admin Only)"

    # ------------------------------------------------------------------
    # Login screen
    # ------------------------------------------------------------------
    def login_screen(self) -> bool:
        """Loop until the user logs in (True) or chooses to exit (False)."""
        while True:
            print("\n--- Login ---")
            print("1. Login")
            print("2. Register")
            print("3. Exit")
            choice = _ask("Enter your choice: ")
            if choice == "1":
                email = _ask("Enter email: ")
                password = _ask("Enter password: ")
                if self._login(email, password):
                    print("Login successful!")
                    return True
                print("Invalid email or password. Please try again.")
            elif choice == "2":
                self.register()
            elif choice == "3":
                return False
            else:
                print("Invalid choice!")

    def _login(self, email: str, password: str) -> bool:
        try:
            with self.db_factory() as db:
                return auth.login(db, self.session, email, password)
        except Exception as e:
            print(describe_error(e, "logging in"))
            return False

    def register(self) -> None:
        print("\n--- Register New User ---")
        first = _ask("Enter first name: ")
        last = _ask("Enter last name: ")
        email = _ask("Enter email: ")
        phone = _ask("Enter phone (XXX-XXX-XXXX): ")
        password = _ask("Enter password: ")
        try:
            with self.db_factory() as db:
                ok = auth.register(db, first, last, email, phone, password)
        except Exception as e:
            print(describe_error(e, "registering"))
            return
        if ok:
            print("Registration successful! You can now login.")
        else:
            print("Email already exists.")

    # ------------------------------------------------------------------
    # Main menu
    # ------------------------------------------------------------------
    def main_menu(self) -> bool:
        """Run the main menu; returns False when the user chose to exit."""
        while self.session.is_authenticated:
            user = self.session.current_user
            print(f"\nWelcome, {user.first_name} ({user.role})")
            print("1. Manage Products")
            print("2. Complete Transactions")
            print("3. Customer History")
            print("4. View Activity Log" + self._admin_label())
            print("5. Logout")
            print("6. Exit")
            choice = _ask("Enter your choice: ")
            if choice == "1":
                self.products_menu()
            elif choice == "2":
                self.transactions_menu()
            elif choice == "3":
                self.history_menu()
            elif choice == "4":
                self.view_activity_log()
            elif choice == "5":
                auth.logout(self.session)
                print("Logged out.")
                return True
            elif choice == "6":
                auth.logout(self.session)
                return False
            else:
                logger.warning("Invalid menu choice: %s", choice)
                print("Invalid choice!")
        return True

    def view_activity_log(self) -> None:
        if not self.session.is_admin:
            logger.warning("Unauthorized attempt to view activity log by user ID: %s", self.session.user_id)
            print("Access denied. Admin privileges required.")
            return
        try:
            if self.pool is not None and not self.pool.is_shutdown:
                contents = self.pool.submit(read_log_contents).result()
            else:
                contents = read_log_contents()
            print(contents)
        except OSError as e:
            print(describe_error(e, "reading the activity log"))

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------
    def products_menu(self) -> None:
        while True:
            print("\n--- Manage Products ---")
            print("1. View Products (Paginated)")
            print("2. Search Products")
            print("3. View Product Sales Analysis" + self._admin_label())
            print("4. Add New Product" + self._admin_label())
            print("5. Modify Existing Product" + self._admin_label())
            print("6. Remove Product" + self._admin_label())
            print("7. Return to Main Menu")
            choice = _ask("Enter your choice: ")
            try:
                if choice == "1":
                    self.view_products_paginated()
                elif choice == "2":
                    self.search_products()
                elif choice == "3":
                    self.sales_analysis()
                elif choice == "4":
                    self.add_product()
                elif choice == "5":
                    self.modify_product()
                elif choice == "6":
                    self.remove_product()
                elif choice == "7":
                    return
                else:
                    print("Invalid choice!")
            except ValueError:
                print("Please enter valid numeric values.")

    def view_products_paginated(self) -> None:
        page, sort_by, order = 1, "id", "asc"
        while True:
            result = self._call("retrieving paginated products", products.list_products,
                                page=page, page_size=self.page_size, sort_by=sort_by, order=order)
            if result is None:
                return
            print(f"\n--- Products (Page {result.page}) ---")
            if result.items:
                _print_products(result.items)
                print(LINE)
                print(f"Page {result.page} of {result.total_pages} (Total products: {result.total})")
            else:
                print("No products found on this page.")

            print("\n1. Next Page  2. Previous Page  3. Change Sort Order  4. Return")
            nav = _ask("Enter your choice: ")
            if nav == "1":
                if page < result.total_pages:
                    page += 1
                else:
                    print("Already on the last page.")
            elif nav == "2":
                if page > 1:
                    page -= 1
                else:
                    print("Already on the first page.")
            elif nav == "3":
                print("Sort by: 1. Product ID  2. Product Name  3. Price  4. Quantity")
                sort_by = {"1": "id", "2": "name", "3": "price", "4": "quantity"}.get(_ask("Enter your choice: "), "id")
                print("Direction: 1. Ascending  2. Descending")
                order = "desc" if _ask("Enter your choice: ") == "2" else "asc"
                page = 1
            elif nav == "4":
                return
            else:
                print("Invalid choice!")

    def search_products(self) -> None:
        print("\n--- Search Products ---")
        name = _ask("Enter product name (or press Enter to skip): ")
        min_price = _ask_optional_float("Enter minimum price (or press Enter to skip): ")
        max_price = _ask_optional_float("Enter maximum price (or press Enter to skip): ")
        in_stock = _ask("Show only in-stock items? (y/n): ").lower().startswith("y")
        found = self._call("searching products", products.search_products, name=name,
                           min_price=min_price, max_price=max_price, in_stock_only=in_stock)
        if found is None:
            return
        if not found:
            print("No products found matching your criteria.")
            return
        print("\n--- Search Results ---")
        _print_products(found)
        print(LINE)
        print(f"Found {len(found)} products matching your criteria.")

    def sales_analysis(self) -> None:
        rows = self._call("retrieving product sales analysis", reports.product_sales_analysis)
        if rows is None:
            return
        if not rows:
            print("No sales data available.")
            return
        print("\n--- Product Sales Analysis ---")
        print(f"{'ID':<10} {'Name':<25} {'Price':<10} {'Stock':<10} {'Times Sold':<10} {'Qty Sold':<15} {'Revenue':<15}")
        for r in rows:
            print(f"{r.id:<10} {r.name:<25} ${r.price:<9.2f} {r.current_stock:<10} {r.times_sold:<10} "
                  f"{r.quantity_sold:<15} ${r.revenue:<14.2f}")

    def add_product(self) -> None:
        product_id = _ask("Enter Product ID: ")
        name = _ask("Enter Product Name: ")
        price = float(_ask("Enter Product Price: "))
        quantity = _ask_int("Enter Product Quantity: ")
        if self._call("adding product", products.add_product, product_id, name, price, quantity):
            print("Product added successfully!")

    def modify_product(self) -> None:
        product_id = _ask("Enter Product ID to modify: ")
        current = self._call("modifying product", products.get_product, product_id)
        if current is None:
            return
        print(f"Current: {current.id} - {current.name}, ${current.price:.2f}, Quantity: {current.quantity}")
        print("1. Name  2. Price  3. Quantity  4. All fields")
        choice = _ask("What would you like to modify? ")
        changes = {}
        if choice in ("1", "4"):
            changes["name"] = _ask("Enter new name: ")
        if choice in ("2", "4"):
            changes["price"] = float(_ask("Enter new price: "))
        if choice in ("3", "4"):
            changes["quantity"] = _ask_int("Enter new quantity: ")
        if not changes:
            print("Invalid choice!")
            return
        if self._call("modifying product", products.modify_product, product_id, **changes):
            print("Product updated successfully!")

    def remove_product(self) -> None:
        product_id = _ask("Enter Product ID to remove: ")
        if _ask(f"Remove product {product_id}? (y/n): ").lower() != "y":
            print("Removal cancelled.")
            return
        try:
            with self.db_factory() as db:
                products.remove_product(db, self.session, product_id)
        except Exception as e:
            print(describe_error(e, "removing product"))
            return
        print("Product removed successfully!")

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------
    def transactions_menu(self) -> None:
        while True:
            print("\n--- Complete Transactions ---")
            print("1. Add a New Client" + self._admin_label())
            print("2. Search for Products")
            print("3. Make a Purchase")
            print("4. View Customer Purchase History")
            print("5. View Customer Purchase Summary")
            print("6. Return to Main Menu")
            choice = _ask("Enter your choice: ")
            try:
                if choice == "1":
                    self.add_client()
                elif choice == "2":
                    self.search_products()
                elif choice == "3":
                    self.make_purchase()
                elif choice == "4":
                    self.view_history(_ask_int("Enter Customer ID: "))
                elif choice == "5":
                    self.view_summary(_ask_int("Enter Customer ID: "))
                elif choice == "6":
                    return
                else:
                    print("Invalid choice!")
            except ValueError:
                print("Please enter valid numeric values.")

    def add_client(self) -> None:
        if not self.session.is_admin:
            logger.warning("Unauthorized access attempt to add client")
            print("Access denied. Admin privileges required.")
            return
        first = _ask("First Name: ")
        last = _ask("Last Name: ")
        email = _ask("Email: ")
        phone = _ask("Phone (XXX-XXX-XXXX): ")
        client = self._call("adding client", transactions.add_client, first, last, email, phone)
        if client:
            print("Client added successfully.")
            print(f"Assigned Person ID: {client.id}")
            print("Please use this ID when making a purchase.")

    def make_purchase(self) -> None:
        customer_id = _ask_int("Enter Customer ID: ")
        term = _ask("Enter product name or ID (or press Enter to see all products): ")
        found = self._call("searching products", transactions.browse_purchasable, term)
        if not found:
            if found is not None:
                print("No products found matching your search term.")
            return
        _print_products(found)
        product_id = found[0].id if len(found) == 1 and found[0].id == term else _ask("\nEnter Product ID to purchase: ")
        quantity = _ask_int("Enter Quantity: ")
        receipt = self._call("processing purchase", transactions.make_purchase, customer_id, product_id, quantity)
        if receipt:
            print("Purchase completed successfully.")
            print(f"Total price: ${receipt.total:.2f}")
            print(f"Remaining stock: {receipt.remaining_stock}")

    # ------------------------------------------------------------------
    # Customer history
    # ------------------------------------------------------------------
    def history_menu(self) -> None:
        while True:
            print("\n--- Customer History ---")
            print("1. Search Customer by Email")
            print("2. View Customer Purchase History")
            print("3. View Customer Purchase Summary")
            print("4. View Past Purchases" + self._admin_label())
            print("5. Return to Main Menu")
            choice = _ask("Enter your choice: ")
            try:
                if choice == "1":
                    self.search_customer(_ask("Enter customer email to search: "))
                elif choice == "2":
                    self.view_history(_ask_int("Enter customer ID: "))
                elif choice == "3":
                    self.view_summary(_ask_int("Enter customer ID: "))
                elif choice == "4":
                    self.view_all_purchases()
                elif choice == "5":
                    return
                else:
                    print("Invalid choice!")
            except ValueError:
                print("Please enter a number corresponding to the menu options.")

    def search_customer(self, email: str) -> None:
        person = self._call("searching for customer", transactions.find_customer_by_email, email)
        if person:
            print(f"Customer Found: {person}")
            self.view_summary(person.id)

    def view_summary(self, customer_id: int) -> None:
        summary = self._call("retrieving customer purchase summary", reports.purchase_summary, customer_id)
        if summary is None:
            return
        print("\n--- Customer Purchase Summary ---")
        print(f"Customer ID: {summary.customer_id}")
        print(f"Name: {summary.first_name} {summary.last_name}")
        print(f"Email: {summary.email}")
        if summary.total_transactions:
            print("\nPurchase Statistics:")
            print(f"Total Transactions: {summary.total_transactions}")
            print(f"Total Items Purchased: {summary.total_items}")
            print(f"Total Amount Spent: ${summary.total_spent:.2f}")
            print(f"Last Purchase Date: {summary.last_purchase}")
        else:
            print("\nNo purchase history found for this customer.")

    def view_history(self, customer_id: int) -> None:
        self._paginate_purchases(
            lambda page: self._call("retrieving customer purchase history", history.purchase_history,
                                    customer_id, page=page, page_size=self.page_size),
            "Purchase History", with_customer=False,
        )

    def view_all_purchases(self) -> None:
        self._paginate_purchases(
            lambda page: self._call("retrieving past purchases", history.all_purchases,
                                    page=page, page_size=self.page_size),
            "All Purchases", with_customer=True,
        )

    def _paginate_purchases(self, fetch, title: str, with_customer: bool) -> None:
        page = 1
        while True:
            result = fetch(page)
            if result is None:
                return
            print(f"\n--- {title} (Page {result.page}) ---")
            if not result.total:
                print("No purchases found.")
                return
            _print_purchases(result, with_customer)
            print(WIDE_LINE)
            print(f"Page {result.page} of {result.total_pages} (Total purchases: {result.total})")
            print("\n1. Next Page  2. Previous Page  3. Return")
            nav = _ask("Enter your choice: ")
            if nav == "1":
                if page < result.total_pages:
                    page += 1
                else:
                    print("Already on the last page.")
            elif nav == "2":
                if page > 1:
                    page -= 1
                else:
                    print("Already on the first page.")
            elif nav == "3":
                return
            else:
                print("Invalid choice!")

    def run(self) -> None:
        while self.login_screen():
            if not self.main_menu():
                break
        print("Exiting the application. Goodbye!")


def interactive_cli(db_factory=None, page_size: int = None, pool: WorkerPool = None) -> None:
    """Provide the console interface to the store database."""
    ConsoleApp(db_factory or get_db, page_size or settings.PAGE_SIZE, pool).run()

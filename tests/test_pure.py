import unittest
from datetime import date, time

from store.models import Appointment, Client, Product, Sale
from utils.pure import (
    chart_series,
    dashboard_stats,
    generate_markdown_table,
    inventory_value,
    recent_products,
    render_bar_chart,
    report_filter,
    resolve_name,
    sale_total,
    sales_revenue,
)


def appt(day: int, status: str = "pending", id: str = "") -> Appointment:
    return Appointment("Ana", date(2024, 1, day), time(9, 0), "Corte", status=status, id=id or None)


class AggregationTestCase(unittest.TestCase):
    def test_inventory_value(self):
        self.assertEqual(inventory_value([]), 0)
        products = [Product("A", 10.0, "General", stock=3), Product("B", 2.5, "General")]
        self.assertEqual(inventory_value(products), 10.0 * 3 + 2.5 * 10)

    def test_dashboard_stats(self):
        appts = [
            appt(1, "pending"),
            appt(2, "confirmed"),
            appt(3, "completed"),
            appt(4, "cancelled"),
            appt(5, "pending"),
        ]
        stats = dashboard_stats(appts, [Product("A", 5.0, "General")])
        self.assertEqual(stats["total_appointments"], 5)
        self.assertEqual(stats["pending_appointments"], 2)
        self.assertEqual(stats["completed_appointments"], 1)
        self.assertLessEqual(
            stats["pending_appointments"] + stats["completed_appointments"],
            stats["total_appointments"],
        )
        self.assertEqual(stats["total_products"], 1)
        self.assertEqual(stats["inventory_value"], 50.0)

    def test_chart_series(self):
        self.assertEqual(chart_series([]), [])
        series = chart_series([appt(5), appt(3), appt(5)])
        self.assertEqual(series, [(date(2024, 1, 3), 1), (date(2024, 1, 5), 2)])

    def test_render_bar_chart(self):
        self.assertEqual(render_bar_chart([]), "")
        lines = render_bar_chart([(date(2024, 1, 3), 1), (date(2024, 1, 5), 2)], width=10).splitlines()
        self.assertEqual(lines[0], "2024-01-03  " + "█" * 5 + " 1")
        self.assertEqual(lines[1], "2024-01-05  " + "█" * 10 + " 2")

    def test_report_filter(self):
        appts = [appt(1, "pending"), appt(2, "completed"), appt(3, "cancelled")]
        self.assertEqual(report_filter(appts, "all"), appts)
        self.assertEqual(report_filter(appts, "pending"), [appts[0]])
        self.assertEqual(report_filter(appts, "completed"), [appts[1]])
        self.assertEqual(report_filter([], "completed"), [])
        with self.assertRaises(ValueError):
            report_filter(appts, "cancelled")

    def test_recent_products(self):
        products = [Product(str(i), 1.0, "General") for i in range(5)]
        self.assertEqual([p.name for p in recent_products(products)], ["2", "3", "4"])
        self.assertEqual(recent_products(products[:2]), products[:2])
        self.assertEqual(recent_products(products, 0), [])


class SalesTestCase(unittest.TestCase):
    def test_sale_total(self):
        self.assertEqual(sale_total(100.0, 15.5), 115.5)
        self.assertEqual(sale_total(0.1, 0.2), 0.3)
        self.assertEqual(sale_total(50.0, 0), 50.0)

    def test_sales_revenue(self):
        self.assertEqual(sales_revenue([]), 0)
        sales = [
            Sale("p", "c", "s", date(2024, 1, 1), "Cash", 10.0, total=12.0),
            Sale("p", "c", "s", date(2024, 1, 2), "Transfer", 20.0, total=20.0),
        ]
        self.assertEqual(sales_revenue(sales), 32.0)

    def test_resolve_name(self):
        clients = [Client("Ana", "a@x.com", "1", id="c1")]
        self.assertEqual(resolve_name(clients, "c1"), "Ana")
        self.assertEqual(resolve_name(clients, "gone", "Cliente Eliminado"), "Cliente Eliminado")
        self.assertEqual(resolve_name(clients, None), "-")
        self.assertEqual(resolve_name(clients, ""), "-")


class MarkdownTableTestCase(unittest.TestCase):
    def test_generate_markdown_table(self):
        md = generate_markdown_table(["A", "B"], [[1, "x"]], ["l", "r"])
        self.assertEqual(md, "| A | B |\n| :--- | ---: |\n| 1 | x |")
        self.assertEqual(generate_markdown_table(["A"], []), "")
        with self.assertRaises(ValueError):
            generate_markdown_table(["A", "B"], [[1, 2]], ["l"])


if __name__ == "__main__":
    unittest.main()

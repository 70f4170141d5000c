from __future__ import annotations

import unittest

from services import crawler_service, dashboard_service, product_service, schedule_service, user_service
from services.models import JobStatus
from tests.helpers import FakeApi


class UserServiceTests(unittest.TestCase):
    def test_login_and_me(self) -> None:
        api = FakeApi({("GET", "/users/me"): {"user": {"email": "a@shop.vn", "name": "A", "role": "admin"}}})
        user_service.login(api, email="a@shop.vn", password="secret1")
        user = user_service.get_me(api)

        self.assertEqual(api.calls[0], ("POST", "/users/login", {"json": {"email": "a@shop.vn", "password": "secret1"}}))
        self.assertTrue(user.is_admin)

    def test_me_without_user(self) -> None:
        self.assertIsNone(user_service.get_me(FakeApi({("GET", "/users/me"): {}})))

    def test_register_omits_empty_role(self) -> None:
        api = FakeApi()
        user_service.register(api, email="b@shop.vn", password="secret1", name="B")
        self.assertEqual(api.calls[0][2]["json"], {"email": "b@shop.vn", "password": "secret1", "name": "B"})

    def test_change_password_body(self) -> None:
        api = FakeApi()
        user_service.change_password(api, old_password="old-pw", new_password="new-pw")
        self.assertEqual(api.calls[0], (
            "POST", "/users/change-password", {"json": {"oldPassword": "old-pw", "newPassword": "new-pw"}},
        ))

    def test_validate_password_change(self) -> None:
        self.assertEqual(user_service.validate_password_change("a", "abcdef", "abcdeg")[0], "password.mismatch")
        self.assertEqual(user_service.validate_password_change("a", "abc", "abc")[0], "password.too_short")
        self.assertEqual(user_service.validate_password_change("abcdef", "abcdef", "abcdef")[0], "password.same_as_old")
        self.assertIsNone(user_service.validate_password_change("old-pw", "new-pw", "new-pw"))

    def test_list_users_accepts_plain_list_or_wrapped(self) -> None:
        users = [{"_id": "1", "email": "x@shop.vn"}]
        self.assertEqual(user_service.list_users(FakeApi({("GET", "/users/"): users})), users)
        self.assertEqual(user_service.list_users(FakeApi({("GET", "/users/"): {"data": users}})), users)
        self.assertEqual(user_service.list_users(FakeApi({("GET", "/users/"): {"users": users}})), users)

    def test_admin_endpoints(self) -> None:
        api = FakeApi({("GET", "/users/u1/activity"): {"activity": {"viewHistory": []}}})
        self.assertEqual(user_service.get_user_activity(api, "u1"), {"viewHistory": []})
        user_service.send_email(api, "u1", subject="Hi", text="Hello")
        user_service.send_activity_summary(api, "u1")
        self.assertEqual([c[:2] for c in api.calls[1:]], [
            ("POST", "/users/u1/send-email"),
            ("POST", "/users/u1/send-activity-summary"),
        ])
        self.assertEqual(api.calls[1][2]["json"], {"subject": "Hi", "text": "Hello"})


class ProductServiceTests(unittest.TestCase):
    def test_listing_parses_products_and_pagination(self) -> None:
        api = FakeApi({("GET", "/products/"): {
            "data": [{"_id": "p1", "name": "iPhone 15", "price": 19990000, "sourceUrl": "https://shop/p1"}],
            "pagination": {"currentPage": 2, "totalPages": 4, "totalProducts": 40, "hasNextPage": True, "hasPrevPage": True},
        }})
        products, pagination = product_service.get_all_products(api, {"page": 2, "search": "iphone"})

        self.assertEqual(api.calls[0], ("GET", "/products/", {"params": {"page": 2, "search": "iphone"}}))
        self.assertEqual(products[0].id, "p1")
        self.assertEqual(products[0].source_url, "https://shop/p1")
        self.assertEqual(pagination.total_pages, 4)
        self.assertTrue(pagination.has_next_page)

    def test_history(self) -> None:
        api = FakeApi({("GET", "/products/p1/history"): {
            "data": [{"changedAt": "2024-05-01T10:00:00Z", "changes": [
                {"field": "price", "oldValue": 100, "newValue": 90},
            ]}],
            "total": 7,
        }})
        history, total = product_service.get_product_history(api, "p1", limit=10)
        self.assertEqual(total, 7)
        self.assertEqual(history[0].changes[0].new_value, 90)
        self.assertEqual(api.calls[0][2], {"params": {"limit": 10}})

    def test_tracking_and_delete(self) -> None:
        api = FakeApi()
        product_service.record_view(api, "p1")
        product_service.record_redirect(api, "p1", "cellphones")
        product_service.delete_product(api, "p1")
        self.assertEqual([c[:2] for c in api.calls], [
            ("POST", "/products/p1/view"),
            ("POST", "/products/p1/redirect"),
            ("DELETE", "/products/p1"),
        ])
        self.assertEqual(api.calls[1][2]["json"], {"source": "cellphones"})

    def test_top_products_defaults_to_empty_lists(self) -> None:
        self.assertEqual(product_service.get_top_products(FakeApi(), "7d"), {"topViewed": [], "topRedirected": []})


class CrawlerServiceTests(unittest.TestCase):
    def test_jobs_page(self) -> None:
        api = FakeApi({("GET", "/crawler/jobs"): {"data": {
            "jobs": [{"_id": "x", "jobId": "job-1", "source": "dienmayxanh", "category": "phone", "status": "running"}],
            "pagination": {"totalPages": 3},
        }}})
        jobs, total_pages = crawler_service.get_crawl_jobs(api, page=2, limit=10)
        self.assertEqual(total_pages, 3)
        self.assertEqual(jobs[0].job_id, "job-1")
        self.assertTrue(jobs[0].is_running)
        self.assertTrue(jobs[0].is_cancellable)
        self.assertEqual(api.calls[0][2]["params"]["page"], 2)

    def test_logs_stats_and_cancel(self) -> None:
        api = FakeApi({
            ("GET", "/crawler/jobs/job-1/logs"): {"data": {"logs": [{"level": "error", "message": "timeout"}]}},
            ("GET", "/crawler/stats"): {"data": {"total": 9, "running": 1, "failed": 2}},
        })
        logs = crawler_service.get_crawl_job_logs(api, "job-1", limit=200)
        stats = crawler_service.get_crawl_stats(api)
        crawler_service.cancel_crawl_job(api, "job-1")

        self.assertEqual(logs[0].level, "error")
        self.assertEqual((stats.total, stats.running, stats.completed, stats.failed), (9, 1, 0, 2))
        self.assertEqual(api.calls[-1][:2], ("POST", "/crawler/jobs/job-1/cancel"))

    def test_run_crawler_endpoints(self) -> None:
        api = FakeApi()
        for kind in ("dmx", "tgdd", "tgdd-laptop"):
            crawler_service.run_crawler(api, kind)
        self.assertEqual([c[1] for c in api.calls], ["/crawler/run", "/crawler/run-tgdd", "/crawler/run-tgdd-laptop"])
        with self.assertRaises(ValueError):
            crawler_service.run_crawler(api, "unknown")

    def test_completed_job_is_not_cancellable(self) -> None:
        api = FakeApi({("GET", "/crawler/jobs/job-2"): {"data": {"jobId": "job-2", "status": JobStatus.COMPLETED.value}}})
        job = crawler_service.get_crawl_job_detail(api, "job-2")
        self.assertFalse(job.is_cancellable)


class DashboardServiceTests(unittest.TestCase):
    def test_stats_and_activity(self) -> None:
        api = FakeApi({
            ("GET", "/dashboard/stats"): {"data": {"overview": {"totalProducts": 5}}},
            ("GET", "/dashboard/recent-activity"): {"data": {"recentUsers": []}},
        })
        self.assertEqual(dashboard_service.get_dashboard_stats(api, "30d"), {"overview": {"totalProducts": 5}})
        self.assertEqual(dashboard_service.get_recent_activity(api, 10), {"recentUsers": []})
        self.assertEqual(api.calls[0][2], {"params": {"timeRange": "30d"}})
        self.assertEqual(api.calls[1][2], {"params": {"limit": 10}})


class ScheduleServiceTests(unittest.TestCase):
    def test_create_sends_camel_case_body(self) -> None:
        api = FakeApi()
        schedule_service.create_schedule(
            api, name="Nightly phones", source="dienmayxanh", category="phone", cron_expression="0 2 * * *",
        )
        self.assertEqual(api.calls[0], ("POST", "/crawler/schedules", {"json": {
            "name": "Nightly phones",
            "source": "dienmayxanh",
            "category": "phone",
            "cronExpression": "0 2 * * *",
            "timezone": "Asia/Ho_Chi_Minh",
            "isActive": True,
        }}))

    def test_update_sends_only_editable_fields(self) -> None:
        api = FakeApi()
        schedule_service.update_schedule(api, "s1", cron_expression="*/30 * * * *", is_active=False)
        self.assertEqual(api.calls[0], (
            "PUT", "/crawler/schedules/s1", {"json": {"cronExpression": "*/30 * * * *", "isActive": False}},
        ))

    def test_list_toggle_delete(self) -> None:
        api = FakeApi({("GET", "/crawler/schedules"): {"data": [
            {"_id": "s1", "name": "Nightly", "cronExpression": "0 2 * * *", "isActive": True},
        ]}})
        schedules = schedule_service.get_schedules(api)
        schedule_service.toggle_schedule(api, "s1")
        schedule_service.delete_schedule(api, "s1")
        self.assertEqual(schedules[0].cron_expression, "0 2 * * *")
        self.assertTrue(schedules[0].is_active)
        self.assertEqual([c[:2] for c in api.calls[1:]], [
            ("PATCH", "/crawler/schedules/s1/toggle"),
            ("DELETE", "/crawler/schedules/s1"),
        ])


if __name__ == "__main__":
    unittest.main()

from __future__ import annotations

from typing import Any

from loguru import logger
from nicegui import app

from services.app_config import get_app_config

DEFAULT_LANGUAGE = "en"
SUPPORTED_LANGUAGES: list[dict[str, str]] = [
    {"code": "en", "label": "English"},
    {"code": "vi", "label": "Tiếng Việt"},
]
SUPPORTED_LANGUAGE_CODES = [entry["code"] for entry in SUPPORTED_LANGUAGES]

# English text lives at the call site (``t(key, default)``); this table only
# carries the other languages.
_TRANSLATIONS: dict[str, dict[str, str]] = {
    "app.title": {"vi": "So sánh giá"},
    "header.logout": {"vi": "Đăng xuất"},
    "header.login": {"vi": "Đăng nhập"},
    "nav.home": {"vi": "Trang chủ"},
    "nav.products": {"vi": "Sản phẩm"},
    "nav.profile": {"vi": "Hồ sơ"},
    "nav.change_password": {"vi": "Đổi mật khẩu"},
    "nav.admin_dashboard": {"vi": "Tổng quan"},
    "nav.admin_products": {"vi": "Quản lý sản phẩm"},
    "nav.admin_users": {"vi": "Người dùng"},
    "nav.admin_crawler": {"vi": "Crawler"},
    "login.title": {"vi": "Đăng nhập"},
    "login.email": {"vi": "Email"},
    "login.password": {"vi": "Mật khẩu"},
    "login.submit": {"vi": "Đăng nhập"},
    "login.failed": {"vi": "Đăng nhập thất bại"},
    "register.title": {"vi": "Đăng ký"},
    "register.failed": {"vi": "Đăng ký thất bại"},
    "guard.checking": {"vi": "Đang kiểm tra phiên đăng nhập..."},
    "products.load_failed": {"vi": "Lỗi tải danh sách sản phẩm"},
    "products.search": {"vi": "Tìm kiếm sản phẩm"},
    "products.apply": {"vi": "Áp dụng"},
    "products.clear": {"vi": "Xóa bộ lọc"},
    "products.empty": {"vi": "Không tìm thấy sản phẩm"},
    "products.detail_failed": {"vi": "Không mở được chi tiết sản phẩm"},
    "products.delete_ok": {"vi": "Đã xóa sản phẩm"},
    "products.delete_failed": {"vi": "Xóa sản phẩm thất bại"},
    "crawler.jobs_failed": {"vi": "Lỗi khi tải danh sách jobs"},
    "crawler.logs_failed": {"vi": "Lỗi khi tải logs"},
    "crawler.cancel_ok": {"vi": "Đã hủy job thành công"},
    "crawler.cancel_failed": {"vi": "Lỗi khi hủy job"},
    "crawler.auto_refresh": {"vi": "Tự động làm mới"},
    "crawler.run_failed": {"vi": "Crawl thất bại"},
    "schedules.load_failed": {"vi": "Lỗi khi tải danh sách lịch crawl"},
    "schedules.toggle_ok": {"vi": "Đã cập nhật trạng thái lịch crawl"},
    "schedules.toggle_failed": {"vi": "Lỗi khi cập nhật trạng thái"},
    "schedules.delete_ok": {"vi": "Xóa lịch crawl thành công"},
    "schedules.delete_failed": {"vi": "Lỗi khi xóa lịch crawl"},
    "schedules.create_ok": {"vi": "Tạo lịch crawl thành công"},
    "schedules.update_ok": {"vi": "Cập nhật lịch crawl thành công"},
    "schedules.save_failed": {"vi": "Có lỗi xảy ra"},
    "dashboard.load_failed": {"vi": "Lỗi khi tải dữ liệu dashboard"},
    "password.mismatch": {"vi": "Mật khẩu mới và xác nhận mật khẩu không khớp"},
    "password.too_short": {"vi": "Mật khẩu mới phải có ít nhất 6 ký tự"},
    "password.same_as_old": {"vi": "Mật khẩu mới phải khác mật khẩu cũ"},
    "password.changed": {"vi": "Đổi mật khẩu thành công"},
    "password.relogin": {"vi": "Đổi mật khẩu thành công! Vui lòng đăng nhập lại"},
    "password.failed": {"vi": "Đổi mật khẩu thất bại"},
    "users.load_failed": {"vi": "Không lấy được danh sách người dùng"},
    "users.activity_failed": {"vi": "Không lấy được activity"},
    "users.email_ok": {"vi": "Gửi email thành công"},
    "users.email_failed": {"vi": "Gửi email thất bại"},
    "users.summary_ok": {"vi": "Đã gửi email tóm tắt hoạt động"},
    "users.summary_failed": {"vi": "Gửi email tóm tắt thất bại"},
    "profile.updated": {"vi": "Đã cập nhật hồ sơ"},
    "profile.update_failed": {"vi": "Cập nhật hồ sơ thất bại"},
    "profile.activity_failed": {"vi": "Không tải được hoạt động"},
    "crawler.stats_failed": {"vi": "Lỗi khi tải thống kê crawler"},
    "crawler.started": {"vi": "Đang crawl {label}..."},
    "crawler.run_ok": {"vi": "Crawl hoàn tất"},
    "crawler.run": {"vi": "Chạy crawler"},
    "crawler.stats": {"vi": "Thống kê crawler"},
    "crawler.jobs": {"vi": "Lịch sử job"},
    "schedules.title": {"vi": "Lịch crawl"},
    "schedules.new": {"vi": "Tạo lịch mới"},
    "schedules.required": {"vi": "Vui lòng nhập tên và biểu thức cron"},
    "dashboard.loading": {"vi": "Đang tải dữ liệu dashboard..."},
    "home.browse": {"vi": "Xem sản phẩm"},
    "home.categories": {"vi": "Danh mục"},
    "home.sources": {"vi": "Cửa hàng so sánh"},
    "not_found.message": {"vi": "Trang không tồn tại."},
    "not_found.back": {"vi": "Về trang chủ"},
}


def get_language() -> str:
    """
    Resolve active language.

    Inside a NiceGUI UI context prefer the per-user choice
    (``app.storage.user``), then ``ui.language`` from the config; outside one (tests, background tasks) fall back
    to DEFAULT_LANGUAGE.
    """
    try:
        lang = app.storage.user.get("language") or get_app_config().ui.language
    except (RuntimeError, AttributeError):
        # RuntimeError is expected outside UI context.
        lang = DEFAULT_LANGUAGE
    return str(lang) if lang in SUPPORTED_LANGUAGE_CODES else DEFAULT_LANGUAGE


def set_language(language: str) -> str:
    language = language if language in SUPPORTED_LANGUAGE_CODES else DEFAULT_LANGUAGE
    app.storage.user["language"] = language
    logger.info(f"[set_language] - language_updated - language={language}")
    return language


def t(key: str, default: str | None = None, *, language: str | None = None, **kwargs: Any) -> str:
    lang = str(language or get_language())
    text = _TRANSLATIONS.get(key, {}).get(lang) if lang != DEFAULT_LANGUAGE else None
    if not text:
        text = default if default is not None else key
    if kwargs:
        return text.format(**kwargs)
    return text

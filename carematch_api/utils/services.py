from flask import current_app

from carematch.applications import ApplicationService
from carematch.caregivers import CaregiverService
from carematch.chat import ChatCoordinator, MessageLog
from carematch.dashboards import DashboardService
from carematch.notifier import NotificationDispatcher
from carematch.postings import PostingService
from carematch.reviews import ReviewService
from carematch.shared import Database
from carematch.users import UserService


def get_database() -> Database:
    """
    Get the application's shared database (connection pool).

    Returns:
        Database instance
    """
    return current_app.extensions["carematch_db"]


def get_dispatcher() -> NotificationDispatcher:
    return current_app.extensions["carematch_dispatcher"]


def get_user_service() -> UserService:
    """
    Get UserService instance with database connection.

    Returns:
        UserService instance
    """
    return UserService(database=get_database())


def get_posting_service() -> PostingService:
    """
    Get PostingService instance with database connection.

    Returns:
        PostingService instance
    """
    return PostingService(database=get_database(), dispatcher=get_dispatcher())


def get_chat_coordinator() -> ChatCoordinator:
    """
    Get ChatCoordinator instance with database connection.

    Returns:
        ChatCoordinator instance
    """
    return ChatCoordinator(database=get_database())


def get_message_log() -> MessageLog:
    """
    Get MessageLog instance with database connection and notifications.

    Returns:
        MessageLog instance
    """
    return MessageLog(
        database=get_database(),
        dispatcher=get_dispatcher(),
        max_page_size=current_app.config.get("MESSAGE_PAGE_MAX", 100),
    )


def get_application_service() -> ApplicationService:
    """
    Get ApplicationService instance with its chat coordinator.

    Returns:
        ApplicationService instance
    """
    return ApplicationService(
        database=get_database(),
        chat_coordinator=get_chat_coordinator(),
        dispatcher=get_dispatcher(),
    )


def get_review_service() -> ReviewService:
    """
    Get ReviewService instance with database connection.

    Returns:
        ReviewService instance
    """
    return ReviewService(database=get_database())


def get_caregiver_service() -> CaregiverService:
    """
    Get CaregiverService instance with database connection.

    Returns:
        CaregiverService instance
    """
    return CaregiverService(database=get_database())


def get_dashboard_service() -> DashboardService:
    return DashboardService(database=get_database())

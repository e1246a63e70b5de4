"""
Contact form and newsletter sign-up.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from pastry_news.dependencies import get_contact_repository
from pastry_news.records import ContactMessage, NewsletterSubscription
from pastry_news.repositories import ContactRepository
from pastry_news.schemas import ContactRequest, MessageResponse, NewsletterRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contact", tags=["contact"])


@router.post("", response_model=MessageResponse, status_code=201)
def submit_contact(
    payload: ContactRequest,
    contact: ContactRepository = Depends(get_contact_repository),
):
    saved = contact.save_message(
        ContactMessage(
            name=payload.name,
            email=str(payload.email),
            subject=payload.subject,
            message=payload.message,
        )
    )
    logger.info("Contact message %s received", saved.id)
    return MessageResponse(
        message="Thank you for your message! We will get back to you soon."
    )


@router.post("/newsletter", response_model=MessageResponse, status_code=201)
def subscribe_newsletter(
    payload: NewsletterRequest,
    contact: ContactRepository = Depends(get_contact_repository),
):
    _, created = contact.subscribe(
        NewsletterSubscription(email=str(payload.email), name=payload.name)
    )
    if not created:
        return JSONResponse(
            status_code=200,
            content={"message": "You are already subscribed to our newsletter."},
        )
    return MessageResponse(message="Successfully subscribed to newsletter!")

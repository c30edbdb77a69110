"""
Email Templates - Order Confirmation and Admin Alert
=====================================================

HTML bodies for the order emails. Customer-supplied values are escaped.
"""

from datetime import datetime, timezone
from html import escape
from typing import Any, Dict, Optional

from ...domain import Order, format_price
from .mailer import EmailMessageSpec, HIGH_PRIORITY_HEADERS

LOGO_URL = (
    "https://cdn.prod.website-files.com/66e9bed574500384950cc91e/"
    "682448c7f93ce636595a9424_66eac46dad1e9ecc1d56792b_55918_RufHeld_RB-03-FINAL-p-1080.png.png"
)
CONTACT_EMAIL = "info@rufheld.de"
CONTACT_PHONE = "+49 1512 9658221"
WHATSAPP_LINK = "https://wa.me/4915129658221"

REVIEW_PREVIEW_LENGTH = 150

BOX_STYLE = "background: #f8f9fa; border-radius: 8px; padding: 15px; margin: 15px 0; border-left: 4px solid #1DC3A3;"
HEADING_STYLE = "color: #00277C; margin-bottom: 15px; font-size: 20px; border-bottom: 2px solid #1DC3A3; padding-bottom: 5px;"


def stars_label(rating: Any) -> str:
    """'1 Stern' / '4 Sterne'."""
    return f"{rating} {'Stern' if rating == 1 else 'Sterne'}"


def review_text(review: Dict[str, Any]) -> str:
    return review.get("text") or review.get("reviewText") or ""


def reviewer_name(review: Dict[str, Any]) -> str:
    return review.get("reviewer") or review.get("reviewerName") or "Unbekannt"


def _preview(text: str) -> str:
    if not text:
        return "Kein Text"
    if len(text) > REVIEW_PREVIEW_LENGTH:
        return text[:REVIEW_PREVIEW_LENGTH] + "..."
    return text


def _e(value: Optional[Any]) -> str:
    return escape(str(value)) if value is not None else ""


# ══════════════════════════════════════════════════════════════════
#  HTML RENDERERS
# ══════════════════════════════════════════════════════════════════

def render_customer_confirmation(order: Order) -> str:
    price = format_price(order.total_price)
    return f"""
<div style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto;">
    <div style="background: white; padding: 30px 20px; text-align: center; border-bottom: 1px solid #e9ecef;">
        <img src="{LOGO_URL}" alt="Rufheld Logo" style="max-width: 200px; height: auto;">
    </div>
    <div style="background: linear-gradient(135deg, #00277C 0%, #1DC3A3 100%); color: white; padding: 30px 20px; text-align: center;">
        <h2 style="margin: 0 0 10px 0; font-size: 24px;">🏆 Ihr Auftrag wurde eingereicht!</h2>
    </div>
    <div style="padding: 30px 20px;">
        <p>Liebe/r <strong>{_e(order.customer_name)}</strong>,</p>
        <p>vielen Dank für Ihr Vertrauen! Wir haben Ihre Anfrage erhalten und beginnen unmittelbar mit der Bearbeitung Ihrer negativen Bewertungen.</p>
        <div style="{BOX_STYLE}">
            <h3 style="margin-top: 0; color: #00277C;">📋 Ihre Auftragsdetails:</h3>
            <ul style="margin: 0; padding-left: 20px;">
                <li><strong>Auftrags-ID:</strong> {_e(order.order_id)}</li>
                <li><strong>Unternehmen:</strong> {_e(order.business_name)}</li>
                <li><strong>Anzahl Bewertungen:</strong> {order.review_count}</li>
                <li><strong>Gesamtpreis:</strong> €{price} (nur bei Erfolg)</li>
            </ul>
        </div>
        <div style="background: #fff3cd; border: 2px solid #ffc107; border-radius: 8px; padding: 20px; margin: 20px 0; color: #856404;">
            <h3 style="margin-top: 0;">⚠️ WICHTIGER HINWEIS!</h3>
            <p><strong>Falls Sie Kommentare zu den betroffenen negativen Bewertungen hinterlassen haben, bitten wir Sie dringend, diese umgehend zu löschen!</strong>
            Kommentare reduzieren die Erfolgschancen einer Löschung erheblich.</p>
            <ol style="margin: 0; padding-left: 20px;">
                <li>Melden Sie sich in Ihrem Google-Business Account an: <a href="https://business.google.com/reviews/" style="color: #00277C;">https://business.google.com/reviews/</a></li>
                <li>Wählen Sie im Seitenmenü <strong>"Rezensionen verwalten"</strong> oder <strong>"Rezensionen"</strong></li>
                <li>Suchen Sie die betroffene Bewertung und löschen Sie den Kommentar über <strong>"Löschen"</strong></li>
            </ol>
            <p style="margin-bottom: 0;">💬 <strong>Geben Sie uns kurz Bescheid, sobald die Kommentare entfernt wurden</strong>, damit wir umgehend fortfahren können!</p>
        </div>
        <div style="background: #f0fff4; border: 1px solid #1DC3A3; border-radius: 8px; padding: 20px; margin: 20px 0;">
            <h3 style="margin-top: 0; color: #00277C;">⚔️ Was passiert als Nächstes?</h3>
            <ol style="margin: 0; padding-left: 20px;">
                <li>Unser Expertenteam beginnt sofort mit der Analyse und Entfernung</li>
                <li>Erste Ergebnisse binnen 1 Stunde</li>
                <li>Vollständige Bearbeitung binnen 24 Stunden</li>
                <li>Sie zahlen nur bei erfolgreichem Ergebnis</li>
            </ol>
        </div>
        <p><strong>Bei Fragen erreichen Sie uns unter:</strong></p>
        <ul>
            <li>📧 {CONTACT_EMAIL}</li>
            <li>📱 {CONTACT_PHONE}</li>
            <li>💬 <a href="{WHATSAPP_LINK}" style="color: #00277C; text-decoration: none;">WhatsApp</a></li>
        </ul>
    </div>
    <div style="background: #00277C; color: white; padding: 20px; text-align: center; font-weight: 600;">
        Vielen Dank für Ihr Vertrauen!<br>
        Ihr Rufheld Team 🛡️
    </div>
</div>
"""


def render_admin_notification(order: Order) -> str:
    review_blocks = "".join(
        f"""
        <div style="background: #fff5f5; border: 1px solid #fecaca; border-radius: 8px; padding: 15px; margin: 10px 0; border-left: 4px solid #dc3545;">
            <div style="font-weight: 600; color: #dc3545; margin-bottom: 8px;">⭐ {_e(stars_label(review.get('rating')))} von {_e(reviewer_name(review))}</div>
            <div style="color: #666; font-style: italic; background: white; padding: 10px; border-radius: 4px;">"{_e(_preview(review_text(review)))}"</div>
        </div>"""
        for review in order.selected_reviews
    )

    return f"""
<div style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; max-width: 700px; margin: 0 auto;">
    <div style="background: linear-gradient(135deg, #dc3545 0%, #ff6b7a 100%); color: white; padding: 25px 20px; text-align: center;">
        <h2 style="margin: 0; font-size: 28px;">🚨 NEUER AUFTRAG EINGEGANGEN!</h2>
    </div>
    <div style="padding: 30px 20px;">
        <h3 style="{HEADING_STYLE}">👤 Kundendetails:</h3>
        <div style="{BOX_STYLE}">
            <strong>Auftrags-ID:</strong> {_e(order.order_id)}<br>
            <strong>Name:</strong> {_e(order.customer_name)}<br>
            <strong>Email:</strong> {_e(order.customer_email)}<br>
            <strong>Telefon:</strong> {_e(order.customer_phone)}<br>
            <strong>Unternehmen:</strong> {_e(order.business_name)}
        </div>
        <h3 style="{HEADING_STYLE}">💼 Auftragsdetails:</h3>
        <div style="{BOX_STYLE}">
            <strong>Anzahl Reviews:</strong> {order.review_count} negative Bewertungen<br>
            <strong>Google Place ID:</strong> {_e(order.business_place_id)}
        </div>
        <div style="background: #00277C; color: white; padding: 15px; border-radius: 8px; text-align: center; font-size: 20px; font-weight: 700;">
            💰 Gesamtwert: €{format_price(order.total_price)}
        </div>
        <h3 style="{HEADING_STYLE}">📝 Ausgewählte Reviews:</h3>
        {review_blocks}
        <div style="background: #dc3545; color: white; padding: 20px; border-radius: 8px; text-align: center; font-weight: 600;">
            🚀 <strong>SOFORT HANDELN:</strong> Kunde erwartet Ergebnisse binnen 24h!
        </div>
    </div>
</div>
"""


def render_diagnostic_email(sent_at: datetime) -> str:
    return f"""
<h2>🧪 Mail-Test erfolgreich!</h2>
<p>Das Backend kann erfolgreich E-Mails versenden.</p>
<p><strong>Timestamp:</strong> {sent_at.isoformat()}</p>
"""


# ══════════════════════════════════════════════════════════════════
#  MESSAGE BUILDERS
# ══════════════════════════════════════════════════════════════════

def customer_confirmation_message(order: Order, reply_to: str) -> EmailMessageSpec:
    return EmailMessageSpec(
        to=order.customer_email,
        subject=f"✅ Auftrag {order.order_id} erhalten - Rufheld kümmert sich um Ihre negativen Bewertungen",
        html=render_customer_confirmation(order),
        sender_name="Rufheld",
        reply_to=reply_to,
        headers=dict(HIGH_PRIORITY_HEADERS),
    )


def admin_notification_message(order: Order, recipient: str, reply_to: str) -> EmailMessageSpec:
    return EmailMessageSpec(
        to=recipient,
        subject=(
            f"🚨 NEUER AUFTRAG: {order.customer_name} - {order.review_count} Reviews "
            f"(€{format_price(order.total_price)})"
        ),
        html=render_admin_notification(order),
        sender_name="Rufheld Backend",
        reply_to=reply_to,
        headers=dict(HIGH_PRIORITY_HEADERS),
    )


def diagnostic_email_message(recipient: str, sent_at: Optional[datetime] = None) -> EmailMessageSpec:
    sent_at = sent_at or datetime.now(timezone.utc)
    return EmailMessageSpec(
        to=recipient,
        subject="Mail-Test - Rufheld Backend",
        html=render_diagnostic_email(sent_at),
    )

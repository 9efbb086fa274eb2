"""Fixed A4 layout of the invitation letter.

Coordinates are millimetres measured from the top-left corner of the page.
The plan depends only on the token and apartment metadata, so two plans for
the same input are equal.
"""

from dataclasses import dataclass

from app.exports.models import Apartment

PAGE_WIDTH_MM = 210.0
PAGE_HEIGHT_MM = 297.0
MARGIN_MM = 20.0

LINE_PITCH_MM = 6.0
BLOCK_LINE_PITCH_MM = 4.5

TOKEN_BOX_WIDTH_MM = 100.0
TOKEN_BOX_HEIGHT_MM = 40.0
TOKEN_BOX_RADIUS_MM = 3.0
TOKEN_BOX_PADDING_MM = 4.0
QR_SPACING_MM = 10.0
QR_SIZE_MM = TOKEN_BOX_HEIGHT_MM

TOKEN_FONT_HEIGHT_MM = 3.5
TOKEN_LABEL_GAP_MM = 5.0

TEXT_COLOR = (0, 0, 0)
LABEL_COLOR = (107, 114, 128)
TOKEN_COLOR = (17, 24, 39)
BOX_STROKE_COLOR = (229, 231, 235)
BOX_FILL_COLOR = (249, 250, 251)

TITLE = "Sehr geehrte Eigentümer:Innen, sehr geehrte Bewohner!"

INTRODUCTION = (
    "Wie bereits im Zuge der letzten Eigentümerversammlung angekündigt, dürfen wir Sie nun",
    "herzlich einladen, mit Ihrem individuellen Zugang die neue Bewohner-App zu nutzen.",
    "An 365 Tagen rund um die Uhr geöffnet - wir bieten Ihnen diesen exklusiven Service",
    "mit unserer neuen digitalen APP-Lösung an.",
    "",
    "Diese App bietet für Sie wesentliche Vorteile in der Übersicht und der Kommunikation mit",
    "der Hausverwaltung. Wichtige Informationen erhalten Sie tagesaktuell, Schadenmeldungen",
    "können Sie über die App jederzeit an uns melden und zusätzlich können Sie unterwegs auf",
    "die wichtigsten Kontakte im Notfall zugreifen.",
    "",
    "Haben Sie die Wohnung vermietet, oder besitzen mehrere Wohnungen, bietet die App auch",
    "den Vorteil, dass Sie Ihre Wohnungen in Ihrem persönlichen Portal koppeln können, der",
    "jeweilige Mieter wird nur für die gewünschte Wohnung freigeschaltet.",
    "",
    "Wir halten ausdrücklich fest, dass für dieses Tool der Eigentümergemeinschaft keinerlei",
    "Kosten anfallen. Die Kosten, sowohl für die Entwicklung als auch für den laufenden",
    "Betrieb, werden durch die Hausverwaltung finanziert.",
)

INSTRUCTIONS_HEADING = "Anleitung zur Registrierung:"

INSTRUCTIONS = (
    "1. Laden Sie die App aus dem App-Store herunter",
    "2. Registrieren Sie sich mit Ihren Daten",
    "3. Geben Sie den Einladungscode ein",
    "4. Bitte akzeptieren Sie bei der Registrierung die Datenschutzverordnung und erlauben",
    "   Sie Push-Nachrichten, damit Sie keine individuellen und wichtigen Informationen",
    "   verpassen!",
)

TOKEN_LABEL = "Einladungscode:"

CLOSING = (
    "Sollten Sie weitere Unterstützungen oder Informationen benötigen - wir helfen Ihnen",
    "gerne!",
    "",
    "Ihr Hausverwaltungsteam",
)


@dataclass(frozen=True)
class TextLine:
    x: float
    y: float
    text: str
    font: str
    size: float
    color: tuple[int, int, int] = TEXT_COLOR


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class PagePlan:
    lines: tuple[TextLine, ...]
    token_box: Box
    qr_box: Box


def identification_lines(apartment: Apartment) -> tuple[str, str, str]:
    building = apartment.building
    address = building.street
    if building.zip_code:
        address = f"{address}, {building.zip_code}"
    return (
        f"Objekt: {building.name}",
        f"Wohnung: {apartment.name}",
        f"Adresse: {address}",
    )


def plan_page(token: str, apartment: Apartment) -> PagePlan:
    """Lay out the letter top-down from the margin."""
    lines: list[TextLine] = []
    y = MARGIN_MM

    lines.append(TextLine(MARGIN_MM, y, TITLE, "Helvetica", 16))
    y += 10

    for text in INTRODUCTION:
        lines.append(TextLine(MARGIN_MM, y, text, "Helvetica", 11))
        y += LINE_PITCH_MM

    y += 2
    lines.append(TextLine(MARGIN_MM, y, INSTRUCTIONS_HEADING, "Helvetica", 12))
    y += 8

    for text in INSTRUCTIONS:
        lines.append(TextLine(MARGIN_MM, y, text, "Helvetica", 11))
        y += LINE_PITCH_MM

    y += 4
    block_y = y
    for text in identification_lines(apartment):
        lines.append(TextLine(MARGIN_MM, block_y, text, "Helvetica", 11))
        block_y += BLOCK_LINE_PITCH_MM

    y += 20
    token_box = Box(MARGIN_MM, y, TOKEN_BOX_WIDTH_MM, TOKEN_BOX_HEIGHT_MM)
    qr_box = Box(MARGIN_MM + TOKEN_BOX_WIDTH_MM + QR_SPACING_MM, y, QR_SIZE_MM, QR_SIZE_MM)

    text_height = 2 * TOKEN_FONT_HEIGHT_MM + TOKEN_LABEL_GAP_MM
    label_y = y + (TOKEN_BOX_HEIGHT_MM - text_height) / 2 + TOKEN_FONT_HEIGHT_MM
    token_y = label_y + TOKEN_LABEL_GAP_MM + TOKEN_FONT_HEIGHT_MM
    text_x = MARGIN_MM + TOKEN_BOX_PADDING_MM
    lines.append(TextLine(text_x, label_y, TOKEN_LABEL, "Helvetica", 12, LABEL_COLOR))
    lines.append(TextLine(text_x, token_y, token, "Courier", 12, TOKEN_COLOR))

    y += TOKEN_BOX_HEIGHT_MM + 15
    for text in CLOSING:
        lines.append(TextLine(MARGIN_MM, y, text, "Helvetica", 11))
        y += BLOCK_LINE_PITCH_MM

    return PagePlan(lines=tuple(lines), token_box=token_box, qr_box=qr_box)

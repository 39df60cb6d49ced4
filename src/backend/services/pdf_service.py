"""PDF export of a single complaint."""

from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from models.cosmos_documents import ComplaintDocument, UserDocument

PAGE_MARGIN = 20 * mm
CONTENT_WIDTH = A4[0] - (PAGE_MARGIN * 2)
LABEL_WIDTH = 45 * mm

FOOTER_TEXT = "This is an official document generated from the Constituency Management System."

styles = getSampleStyleSheet()

TITLE_STYLE = ParagraphStyle(
    name="ComplaintTitle",
    parent=styles["Title"],
    fontName="Helvetica-Bold",
    fontSize=18,
    leading=22,
    spaceAfter=12,
)

HEADING_STYLE = ParagraphStyle(
    name="SectionHeading",
    fontName="Helvetica-Bold",
    fontSize=12,
    leading=15,
    spaceBefore=8,
    spaceAfter=6,
    keepWithNext=True,
)

BODY_STYLE = ParagraphStyle(
    name="BodyText",
    fontName="Helvetica",
    fontSize=10,
    leading=13,
    wordWrap="CJK",
    splitLongWords=True,
)

LABEL_STYLE = ParagraphStyle(name="LabelText", parent=BODY_STYLE, fontName="Helvetica-Bold")

FOOTER_STYLE = ParagraphStyle(
    name="Footer",
    parent=BODY_STYLE,
    fontSize=8,
    leading=10,
    alignment=1,
    textColor=colors.grey,
)


def _para(value: object, style: ParagraphStyle = BODY_STYLE) -> Paragraph:
    """Wrapping paragraph with escaping; empty values render as N/A."""
    text = escape(str(value or "").strip()).replace("\n", "<br/>")
    return Paragraph(text or "N/A", style)


def _kv_table(rows: list[tuple[str, object]]) -> Table:
    table = Table(
        [[_para(label, LABEL_STYLE), _para(value)] for label, value in rows],
        colWidths=[LABEL_WIDTH, CONTENT_WIDTH - LABEL_WIDTH],
        hAlign="LEFT",
    )
    table.setStyle(
        TableStyle(
            [
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                ("BACKGROUND", (0, 0), (0, -1), colors.whitesmoke),
                ("LEFTPADDING", (0, 0), (-1, -1), 4),
                ("RIGHTPADDING", (0, 0), (-1, -1), 4),
                ("TOPPADDING", (0, 0), (-1, -1), 3),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
            ]
        )
    )
    return table


def _format_timestamp(value) -> str:
    return value.strftime("%d %b %Y, %H:%M UTC") if value else ""


def render_complaint_pdf(
    complaint: ComplaintDocument,
    constituent: UserDocument | None,
    representative: UserDocument | None,
) -> bytes:
    """Render a complaint, its response and both parties as a PDF document."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=PAGE_MARGIN,
        rightMargin=PAGE_MARGIN,
        topMargin=PAGE_MARGIN,
        bottomMargin=PAGE_MARGIN,
        title=f"Complaint {complaint.id}",
    )

    story = [
        _para("Complaint Details", TITLE_STYLE),
        _para("Complaint Information", HEADING_STYLE),
        _kv_table(
            [
                ("Title", complaint.title),
                ("Category", str(complaint.category).capitalize()),
                ("Status", str(complaint.status).replace("-", " ").title()),
                ("Complaint ID", complaint.id),
                ("Submitted On", _format_timestamp(complaint.created_at)),
                ("Last Updated", _format_timestamp(complaint.updated_at)),
            ]
        ),
        _para("Description", HEADING_STYLE),
        _para(complaint.description),
    ]

    if complaint.response:
        story += [_para("Representative Response", HEADING_STYLE), _para(complaint.response)]

    if complaint.attachments:
        story += [
            _para("Attachments", HEADING_STYLE),
            _kv_table([(str(i), a.original_name) for i, a in enumerate(complaint.attachments, start=1)]),
        ]

    for heading, person in (("Constituent Information", constituent), ("Representative Information", representative)):
        story.append(_para(heading, HEADING_STYLE))
        if person is None:
            story.append(_para("Not available"))
        else:
            story.append(_kv_table([("Name", person.name), ("Email", person.email), ("Mobile", person.mobile)]))

    story += [Spacer(1, 12 * mm), _para(FOOTER_TEXT, FOOTER_STYLE)]

    doc.build(story)
    return buffer.getvalue()

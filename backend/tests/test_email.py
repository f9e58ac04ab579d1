from frutico.utils.email import InlineAttachment, build_message

PNG = b"\x89PNG\r\n\x1a\nfake"


def test_inline_image_is_related_to_html_body():
    msg = build_message(
        "Frutico <no-reply@frutico.test>",
        "priya@example.com",
        "Your ticket",
        '<img src="cid:frutico-qr">',
        [InlineAttachment(filename="frutico-ticket.png", content=PNG, cid="frutico-qr")],
    )

    assert msg["To"] == "priya@example.com"
    assert msg.get_content_type() == "multipart/alternative"
    html_related = msg.get_body(preferencelist=("related",))
    assert html_related is not None
    parts = list(html_related.iter_parts())
    assert parts[0].get_content_type() == "text/html"
    image = parts[1]
    assert image.get_content_type() == "image/png"
    assert image["Content-ID"] == "<frutico-qr>"
    assert image.get_filename() == "frutico-ticket.png"
    assert image.get_content() == PNG


def test_plain_text_fallback_present():
    msg = build_message("a@frutico.test", "b@example.com", "s", "<p>hi</p>")
    plain = msg.get_body(preferencelist=("plain",))
    assert "HTML" in plain.get_content()

from src.utils.text_cleaner import clean_html, contains_any, normalize_text, truncate


def test_clean_html_removes_boilerplate_and_scripts():
    html = """
    <html><head><style>.x{}</style><script>alert(1)</script></head>
    <body>
      <div>Découverte majeure en physique &amp; IA !</div>
      <p>Lire la suite</p>
    </body></html>
    """
    cleaned = clean_html(html)
    assert "alert(1)" not in cleaned
    assert "lire la suite" not in cleaned.lower()
    assert "Découverte majeure en physique & IA !" in cleaned


def test_clean_html_drops_wordpress_trailer():
    html = "<p>Un texte.</p><p>L'article Un texte est apparu en premier sur Mon Site.</p>"
    assert clean_html(html) == "Un texte."


def test_normalize_text_is_deterministic_and_idempotent():
    s = "  Le  café   est\n servi  \r ici  "
    a = normalize_text(s)
    assert a == "Le café est servi ici"
    assert normalize_text(a) == a


def test_normalize_text_unescapes_entities():
    assert normalize_text("L&#039;économie &amp; la bourse") == "L'économie & la bourse"
    assert normalize_text("") == ""


def test_truncate():
    assert truncate("court", 10) == "court"
    assert truncate("exactement", 10) == "exactement"
    assert truncate("beaucoup trop long", 8) == "beaucoup..."


def test_contains_any_is_case_insensitive():
    assert contains_any("Le PSG gagne", ["psg", "om"])
    assert not contains_any("Météo du jour", ["psg"])

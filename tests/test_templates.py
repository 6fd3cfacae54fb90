import pytest

from promokit.core.exceptions import RecordNotFoundError
from promokit.promos.store import PromoStore
from promokit.render.promo_data import (
    TemplateBrand,
    TemplateItem,
    TemplatePromo,
    TemplatePromoData,
    format_price,
    load_template_data,
)
from promokit.render.registry import get_template, render_email, render_template


@pytest.fixture
def store(db):
    return PromoStore(db, use_transactions=False)


def sample_data(**overrides):
    data = {
        "promo": TemplatePromo(id="promo-1", title="Spring Lumber Sale", subhead="This week only", cta="Visit us"),
        "items": [TemplateItem(name="2x4 Stud 8ft", price="$4.50", unit="each")],
        "brand": TemplateBrand(name="Acme Building Supply"),
    }
    data.update(overrides)
    return TemplatePromoData(**data)


class TestFormatPrice:
    @pytest.mark.parametrize(
        "value,expected",
        [(4.5, "$4.50"), ("12", "$12.00"), (0, "$0.00"), (None, "$0.00"), ("n/a", "$0.00"), (float("nan"), "$0.00")],
    )
    def test_format(self, value, expected):
        assert format_price(value) == expected


class TestLoadTemplateData:
    def test_defaults_without_brand_kit(self, store, promo, promo_items):
        data = load_template_data(store, "promo-1", "acct-1", watermark=True)

        assert data.promo.title == "Spring Lumber Sale"
        assert data.promo.template_id == "modern"
        assert [item.name for item in data.items] == ["2x4 Stud 8ft", "Deck Screws"]
        assert [item.price for item in data.items] == ["$4.50", "$29.99"]
        assert data.brand.primary_color == "#1a1a2e"
        assert data.brand.secondary_color == "#e94560"
        assert data.brand.name == "Acme Building Supply"
        assert data.branch is None
        assert data.watermark is True

    def test_brand_kit_colors_and_logo(self, db, store, promo):
        db.brand_kits.insert_one(
            {"_id": "bk-1", "account_id": "acct-1", "colors": ["#004488"], "logo_url": "https://acme.example.com/l.png"}
        )

        data = load_template_data(store, "promo-1", "acct-1", watermark=False)

        assert data.brand.primary_color == "#004488"
        assert data.brand.secondary_color == "#e94560"
        assert data.brand.logo_url == "https://acme.example.com/l.png"

    def test_branch_overrides(self, db, store, promo):
        db.branches.insert_one(
            {
                "_id": "br-1",
                "account_id": "acct-1",
                "name": "Main St Yard",
                "address": "1 Main St",
                "phone": "555-0100",
                "cta": "Call the yard",
            }
        )

        data = load_template_data(store, "promo-1", "acct-1", False, branch_id="br-1", branch_name="Downtown")

        assert data.branch.name == "Downtown"
        assert data.branch.address == "1 Main St"
        # promo has no CTA of its own
        assert data.promo.cta == "Call the yard"

    def test_branch_of_another_account_ignored(self, db, store, promo):
        db.branches.insert_one({"_id": "br-9", "account_id": "acct-2", "name": "Elsewhere"})

        assert load_template_data(store, "promo-1", "acct-1", False, branch_id="br-9").branch is None

    def test_unknown_promo(self, store, promo):
        with pytest.raises(RecordNotFoundError):
            load_template_data(store, "promo-1", "acct-2", False)


class TestRegistry:
    def test_unknown_template_falls_back_to_classic(self):
        assert get_template("holographic").id == "classic"
        assert get_template(None).id == "classic"
        assert get_template("bold").id == "bold"

    @pytest.mark.parametrize("template_id,marker", [("classic", 'class="grid"'), ("modern", 'class="stripe'), ("bold", 'class="list"')])
    def test_print_templates(self, template_id, marker):
        html = render_template(template_id, sample_data())

        assert marker in html
        assert "Spring Lumber Sale" in html
        assert "$4.50" in html
        assert "Visit us" in html

    def test_unknown_template_renders_classic(self):
        assert 'class="grid"' in render_template("nope", sample_data())

    def test_social_square(self):
        html = render_template("social-square", sample_data())
        assert 'class="items"' in html
        assert "Spring Lumber Sale" in html

    def test_watermark_toggle(self):
        assert "Made with Promokit" in render_template("modern", sample_data(watermark=True))
        assert "Made with Promokit" not in render_template("modern", sample_data(watermark=False))

    def test_values_are_escaped(self):
        data = sample_data(promo=TemplatePromo(id="p", title="<script>alert(1)</script>"))

        html = render_template("classic", data)

        assert "<script>alert(1)</script>" not in html
        assert "&lt;script&gt;" in html

    def test_email_uses_copy(self):
        html = render_email(
            sample_data(),
            {"subject": "Lumber deals", "preheader": "Save on studs", "bodyHtml": "<p>Come see us.</p>"},
        )

        assert "<title>Lumber deals</title>" in html
        assert "Save on studs" in html
        assert "<p>Come see us.</p>" in html

    def test_email_without_copy(self):
        html = render_email(sample_data(), {"subject": "", "preheader": "", "bodyHtml": ""})

        assert "<title>Spring Lumber Sale</title>" in html

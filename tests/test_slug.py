import pytest

from backshop.utils.slug import generate_slug, is_valid_slug, unique_slug


class TestGenerateSlug:
    def test_lowercases_and_hyphenates(self):
        assert generate_slug("Hello World") == "hello-world"

    def test_collapses_punctuation_and_trims(self):
        assert generate_slug("  --Summer   Sale!!  2024-- ") == "summer-sale-2024"

    def test_strips_diacritics(self):
        assert generate_slug("Crème Brûlée") == "creme-brulee"

    def test_transliterates_cyrillic(self):
        assert generate_slug("Привет мир") == "privet-mir"

    def test_is_deterministic(self):
        assert generate_slug("Nowa Kolekcja") == generate_slug("Nowa Kolekcja")

    @pytest.mark.parametrize(
        "name",
        ["Shoes", "Żółta łódź", "T-shirts & Tops", "100% Cotton", "Ñandú", "a__b", "Книги"],
    )
    def test_generated_slugs_are_valid(self, name):
        assert is_valid_slug(generate_slug(name))

    def test_empty_when_nothing_sluggable(self):
        assert generate_slug("!!!") == ""


class TestIsValidSlug:
    @pytest.mark.parametrize("slug", ["a", "abc-123", "summer-sale-2024"])
    def test_accepts_valid(self, slug):
        assert is_valid_slug(slug)

    @pytest.mark.parametrize("slug", ["", "-a", "a-", "a--b", "Abc", "a_b", "a b", "ą"])
    def test_rejects_invalid(self, slug):
        assert not is_valid_slug(slug)


class TestUniqueSlug:
    async def test_returns_base_when_free(self):
        async def exists(slug):
            return False

        assert await unique_slug("shoes", exists) == "shoes"

    async def test_appends_first_free_suffix(self):
        taken = {"shoes", "shoes-1"}

        async def exists(slug):
            return slug in taken

        assert await unique_slug("shoes", exists) == "shoes-2"

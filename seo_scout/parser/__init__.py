"""seo_scout.parser: извлечение данных страницы из HTML и sitemap.xml."""

"""seo_scout.crawler: обход сайта, загрузка и кэширование страниц."""

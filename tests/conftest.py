"""Shared fixtures for send-to-cal tests."""

import pytest

EVENT_PAGE = """<!DOCTYPE html>
<html>
<head>
  <title>Spring Concert | City Hall</title>
  <meta property="og:title" content="Spring Concert">
  <meta property="og:description" content="Chamber music in the main hall.">
  <meta name="description" content="Chamber music in the main hall.">
  <meta property="article:published_time" content="2025-03-01T08:00:00Z">
  <script type="application/ld+json">{ this is not json </script>
  <script type="application/ld+json">
  {
    "@context": "https://schema.org",
    "@graph": [
      {"@type": "WebPage", "name": "City Hall"},
      {
        "@type": ["Event", "MusicEvent"],
        "name": "Spring Concert",
        "startDate": "2025-04-12T19:30:00+02:00",
        "endDate": "2025-04-12T22:00:00+02:00",
        "description": "An evening of Schubert and Brahms, performed by the City Quartet."
      }
    ]
  }
  </script>
</head>
<body>
  <div itemscope itemtype="https://schema.org/Event">
    <span itemprop="name">Jazz Night</span>
    <meta itemprop="startDate" content="2025-06-01T20:00:00Z">
    <time itemprop="endDate" datetime="2025-06-01T23:00:00Z">11pm</time>
    <div itemprop="description">Standards and improvisation with the Blue Trio.</div>
  </div>
  <main>
    <article>
      <h1>Spring <em>Concert</em></h1>
      <span>tiny</span>
      <p>Doors open at 19:00 and the concert starts at 19:30 sharp.</p>
      <p>Published <time datetime="2025-03-01T08:00:00Z">March 1</time></p>
      <p>Runtime <time datetime="PT2H30M">2.5 hours</time>, season <time datetime="2025">2025</time></p>
    </article>
  </main>
</body>
</html>
"""


@pytest.fixture
def event_page() -> str:
    return EVENT_PAGE

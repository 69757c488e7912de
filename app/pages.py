"""
HTML for the submission form.

The page is self-contained: inline styles plus a small script that
collects optional GPS, timezone, language and device capabilities and
posts them as JSON to /send-message.
"""

from app.schemas import MAX_MESSAGE_LENGTH


_INDEX_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Anonymous Message Board</title>
    <style>
        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            display: flex;
            justify-content: center;
            align-items: center;
            min-height: 100vh;
            margin: 0;
            background: #f5f5f5;
        }}
        .container {{
            background: white;
            padding: 2rem;
            border-radius: 8px;
            box-shadow: 0 2px 10px rgba(0,0,0,0.1);
            width: 100%;
            max-width: 480px;
        }}
        textarea {{ width: 100%; min-height: 120px; box-sizing: border-box; }}
        button {{ margin-top: 1rem; padding: 0.5rem 1.5rem; }}
        #status {{ margin-top: 1rem; color: #666; }}
        #status.error {{ color: #d32f2f; }}
    </style>
</head>
<body>
    <div class="container">
        <h1>Send an anonymous message</h1>
        <form id="message-form">
            <textarea id="message" name="message" maxlength="{max_length}" required></textarea>
            <label><input type="checkbox" id="share-location"> Share my precise location</label>
            <br>
            <button type="submit">Send</button>
        </form>
        <p id="status"></p>
    </div>
    <script>
        function collectDeviceInfo() {{
            const ua = navigator.userAgent;
            const conn = navigator.connection || {{}};
            return {{
                platform: navigator.platform,
                isMobile: /Mobi|Android|iPhone/i.test(ua) && !/iPad|Tablet/i.test(ua),
                isTablet: /iPad|Tablet/i.test(ua),
                screenWidth: screen.width,
                screenHeight: screen.height,
                colorDepth: screen.colorDepth,
                pixelRatio: window.devicePixelRatio,
                connectionType: conn.effectiveType,
                isOnline: navigator.onLine,
                touchSupport: 'ontouchstart' in window || navigator.maxTouchPoints > 0,
                cookiesEnabled: navigator.cookieEnabled,
                hasGyroscope: 'DeviceOrientationEvent' in window,
                hasAccelerometer: 'DeviceMotionEvent' in window,
            }};
        }}

        function currentPosition() {{
            return new Promise((resolve) => {{
                if (!navigator.geolocation) return resolve(null);
                navigator.geolocation.getCurrentPosition(
                    (pos) => resolve(pos.coords),
                    () => resolve(null),
                    {{ timeout: 5000 }}
                );
            }});
        }}

        document.getElementById('message-form').addEventListener('submit', async (event) => {{
            event.preventDefault();
            const status = document.getElementById('status');
            const payload = {{
                message: document.getElementById('message').value,
                browser_timezone: Intl.DateTimeFormat().resolvedOptions().timeZone,
                browser_language: navigator.language,
                deviceInfo: collectDeviceInfo(),
            }};
            if (document.getElementById('share-location').checked) {{
                const coords = await currentPosition();
                if (coords) {{
                    payload.gps_latitude = coords.latitude;
                    payload.gps_longitude = coords.longitude;
                    payload.gps_accuracy = coords.accuracy;
                }}
            }}
            const response = await fetch('/send-message', {{
                method: 'POST',
                headers: {{ 'Content-Type': 'application/json' }},
                body: JSON.stringify(payload),
            }});
            const result = await response.json();
            status.className = result.success ? '' : 'error';
            status.textContent = result.success ? result.message : result.error;
            if (result.success) event.target.reset();
        }});
    </script>
</body>
</html>
"""


def render_index_page() -> str:
    """Render the submission form."""
    return _INDEX_TEMPLATE.format(max_length=MAX_MESSAGE_LENGTH)

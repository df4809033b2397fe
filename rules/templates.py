"""
Response Templates - Canned answers for the support chat
========================================================

Fixed reply texts used by the rule table and the response composer.
These strings are returned to customers verbatim; changing a single
character changes the API output.
"""

CHARGING_PROCEDURE = (
    "To charge your scooter battery properly:\n"
    "1. Use only the provided charger\n"
    "2. Plug into a dry, well-ventilated area\n"
    "3. Charging time is typically 3-4 hours\n"
    "4. Unplug when fully charged\n"
    "5. The LED indicator will show green when complete\n"
    "\n"
    "Avoid overcharging to extend battery life!"
)

WONT_START_TROUBLESHOOTING = (
    "If your scooter won't start, try these steps:\n"
    "1. Check if the power button is pressed and held for 3 seconds\n"
    "2. Ensure the kickstand is up\n"
    "3. Verify the battery is charged (check LED indicators)\n"
    "4. Make sure brake levers are released\n"
    "5. Check for error codes on display\n"
    "6. Ensure you're standing properly on the deck\n"
    "\n"
    "If issues persist, please create a support ticket for further assistance."
)

MAINTENANCE_CHECKLIST = (
    "Daily maintenance checklist:\n"
    "1. Check tire pressure and condition\n"
    "2. Test brake function\n"
    "3. Verify battery charge level\n"
    "4. Ensure lights and signals work\n"
    "5. Check steering and folding mechanism\n"
    "6. Clean debris from wheels\n"
    "7. Inspect for any loose parts\n"
    "\n"
    "Regular maintenance keeps your scooter safe and extends its lifespan!"
)

SAFETY_GUIDELINES = (
    "Essential safety guidelines:\n"
    "1. Always wear a helmet (required by law in many areas)\n"
    "2. Use reflective clothing in low light conditions\n"
    "3. Follow local traffic laws and regulations\n"
    "4. Stay in bike lanes when available\n"
    "5. Avoid riding in rain or wet conditions\n"
    "6. Perform regular safety equipment inspections\n"
    "7. Keep both hands on handlebars\n"
    "8. Don't exceed weight limits\n"
    "\n"
    "Your safety is our priority!"
)

RANGE_FACTORS = (
    "Scooter range depends on several factors:\n"
    "• Battery charge level\n"
    "• Rider weight\n"
    "• Terrain (hills reduce range)\n"
    "• Weather conditions\n"
    "• Speed settings\n"
    "• Tire pressure\n"
    "\n"
    "Typical range is 15-25 miles on a full charge. To maximize range:\n"
    "- Keep tires properly inflated\n"
    "- Use eco mode when possible\n"
    "- Avoid excessive acceleration\n"
    "- Charge battery regularly"
)

SPEED_MODES = (
    "Speed settings and limits:\n"
    "• Eco mode: Up to 12 mph (best for range)\n"
    "• Normal mode: Up to 18 mph (balanced performance)\n"
    "• Sport mode: Up to 25 mph (maximum speed)\n"
    "\n"
    "Speed may be limited by:\n"
    "- Local regulations\n"
    "- Battery level\n"
    "- Weather conditions\n"
    "- Terrain\n"
    "\n"
    "Always comply with local speed limits and safety regulations!"
)

APP_PAIRING = (
    "To connect your scooter to the app:\n"
    "1. Download the EcoRide app from app store\n"
    "2. Enable Bluetooth on your device\n"
    "3. Turn on your scooter\n"
    "4. Open the app and tap 'Connect Device'\n"
    "5. Select your scooter from the list\n"
    "6. Follow pairing instructions\n"
    "\n"
    "The app allows you to:\n"
    "- Lock/unlock remotely\n"
    "- Check battery status\n"
    "- View ride statistics\n"
    "- Update firmware\n"
    "- Find nearby charging stations"
)

# Knowledge base answer: preamble, one block per article, closing prompt
KNOWLEDGE_BASE_PREAMBLE = "Based on our knowledge base, here's relevant information:\n\n"

KNOWLEDGE_BASE_ARTICLE_BLOCK = "**{title}**\n{content}\n\n"

KNOWLEDGE_BASE_CLOSING_PROMPT = (
    "Is there anything specific about this topic you'd like to know more about? "
    "I'm here to help with any questions about your EcoRide scooter!"
)

# The space before the first newline is part of the published text
FALLBACK_RESPONSE = (
    "I'd be happy to help you with your EcoRide scooter question! \n"
    "\n"
    "Common topics I can assist with:\n"
    "• Battery charging and maintenance\n"
    "• Scooter startup and operation\n"
    "• Safety guidelines and equipment\n"
    "• Daily maintenance checklist\n"
    "• App connectivity and features\n"
    "• Troubleshooting common issues\n"
    "\n"
    "Could you please provide more details about what you need help with? "
    "You can also create a support ticket if you need personalized assistance "
    "from our support team."
)

# Returned with HTTP 500 when composing a reply blows up
APOLOGY_RESPONSE = (
    "I'm sorry, I'm having trouble responding right now. "
    "Please try again or create a support ticket for assistance."
)

ERROR_MESSAGE = "An error occurred processing your request"

MISSING_FIELDS_ERROR = "Message and userId are required"
